import pygame
from pygame import display, Color, draw

from chip8.screen import PIXEL_ON

SCREEN_NAME = 'CHIP8 Emulator'

# Sets which keys on the keyboard map to the Chip 8 keys. The Chip 8 keypad
# is laid out on the left hand side of the keyboard:
#
#     1 2 3 C          1 2 3 4
#     4 5 6 D   <--    Q W E R
#     7 8 9 E          A S D F
#     A 0 B F          Z X C V
KEY_MAPPINGS = {
    pygame.K_1: 0x1,
    pygame.K_2: 0x2,
    pygame.K_3: 0x3,
    pygame.K_4: 0xC,
    pygame.K_q: 0x4,
    pygame.K_w: 0x5,
    pygame.K_e: 0x6,
    pygame.K_r: 0xD,
    pygame.K_a: 0x7,
    pygame.K_s: 0x8,
    pygame.K_d: 0x9,
    pygame.K_f: 0xE,
    pygame.K_z: 0xA,
    pygame.K_x: 0x0,
    pygame.K_c: 0xB,
    pygame.K_v: 0xF,
}


def translate_key(pygame_key):
    """
    Returns the Chip 8 key for the pygame key code, or None when the key is
    not part of the keypad.
    """
    return KEY_MAPPINGS.get(pygame_key)


class Window(object):
    """
    The pygame window the framebuffer is presented in. The original Chip 8
    resolution of 64 x 32 is quite small, so every Chip 8 pixel is drawn as
    a square of scale x scale real pixels.
    """
    def __init__(self, screen_width, screen_height, scale, back_color, front_color):
        self.screen_width = screen_width
        self.screen_height = screen_height
        self.scaling_ratio = scale
        self.pixel_colors = {
            0: Color(*back_color),
            1: Color(*front_color),
        }
        self.window_surface = None

    def init_display(self):
        """
        Opens the window and fills it with the background color.
        """
        display.init()
        self.window_surface = display.set_mode(
            (self.screen_width * self.scaling_ratio,
             self.screen_height * self.scaling_ratio))
        display.set_caption(SCREEN_NAME)
        self.window_surface.fill(self.pixel_colors[0])
        display.flip()

    def draw_framebuffer(self, framebuffer):
        """
        Draws every pixel of the framebuffer and flips it to the display.

        :param framebuffer: the rows of pixels, as read from the CPU
        """
        self.window_surface.fill(self.pixel_colors[0])
        for y_axis_position, row in enumerate(framebuffer):
            for x_axis_position, pixel_color in enumerate(row):
                if pixel_color != PIXEL_ON:
                    continue
                draw.rect(self.window_surface,
                          self.pixel_colors[1],
                          (x_axis_position * self.scaling_ratio,
                           y_axis_position * self.scaling_ratio,
                           self.scaling_ratio, self.scaling_ratio))
        display.flip()

    @staticmethod
    def close():
        display.quit()
