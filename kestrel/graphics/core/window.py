# kestrel/graphics/core/window.py
import pygame

from kestrel.graphics.framebuffer import FrameBuffer


class Window:
    """
    Manages the OS window used to preview frame buffers.
    """

    def __init__(self, width: int, height: int, title: str = "Kestrel"):
        if not pygame.get_init():
            pygame.init()

        self._screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption(title)
        self._clock = pygame.time.Clock()
        self.open = True

    @property
    def size(self) -> tuple[int, int]:
        return self._screen.get_size()

    def poll(self) -> bool:
        """Drain events; returns False once the user asked to close."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.open = False
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self.open = False
        return self.open

    def present(self, frame_buffer: FrameBuffer, fps: int = 0) -> None:
        surface = pygame.image.frombuffer(
            frame_buffer.as_raw(),
            (frame_buffer.width, frame_buffer.height),
            "RGBA",
        )
        if surface.get_size() != self.size:
            surface = pygame.transform.smoothscale(surface, self.size)
        self._screen.blit(surface, (0, 0))
        pygame.display.flip()
        if fps:
            self._clock.tick(fps)

    def destroy(self) -> None:
        pygame.quit()
