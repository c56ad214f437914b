# The height of the screen in pixels
SCREEN_HEIGHT = 32

# The width of the screen in pixels
SCREEN_WIDTH = 64

# Each sprite row is one byte, so sprites are always 8 pixels wide
SPRITE_WIDTH = 8

# The Chip 8 supports two colors: 0 (off) and 1 (on)
PIXEL_OFF = 0
PIXEL_ON = 1


class Screen(object):
    """
    A class to emulate a Chip 8 Screen. The original Chip 8 screen was 64 x 32
    with 2 colors. In this emulator, this translates to color 0 (off) and color
    1 (on). The pixels are kept in a single bytearray, one byte per pixel, in
    row-major order. Presenting the pixels is left to the window.
    """
    def __init__(self, screen_height=SCREEN_HEIGHT, screen_width=SCREEN_WIDTH):
        """
        :param screen_height: the height of the screen
        :param screen_width: the width of the screen
        """
        self.screen_height = screen_height
        self.screen_width = screen_width
        self.screen_pixels = bytearray(screen_height * screen_width)

    def pixel_offset(self, x_axis_position, y_axis_position):
        if not 0 <= x_axis_position < self.screen_width:
            raise IndexError("x position out of range: {}".format(x_axis_position))
        if not 0 <= y_axis_position < self.screen_height:
            raise IndexError("y position out of range: {}".format(y_axis_position))
        return y_axis_position * self.screen_width + x_axis_position

    def set_screen_pixel(self, x_axis_position, y_axis_position, pixel_color):
        """
        Turn a pixel on or off at the specified location on the screen. The
        coordinate system starts with (0, 0) being in the top left of the
        screen. No wrapping is done, so the coordinates must be on screen.

        :param x_axis_position: the x coordinate to place the pixel
        :param y_axis_position: the y coordinate to place the pixel
        :param pixel_color: the color of the pixel to draw (0 or 1)
        """
        pixel_color = PIXEL_ON if pixel_color else PIXEL_OFF
        self.screen_pixels[self.pixel_offset(x_axis_position, y_axis_position)] = pixel_color

    def get_screen_pixel(self, x_axis_position, y_axis_position):
        """
        Returns whether the pixel is on (1) or off (0) at the specified
        location.

        :param x_axis_position: the x coordinate to check
        :param y_axis_position: the y coordinate to check
        :return: the color of the specified pixel (0 or 1)
        """
        return self.screen_pixels[self.pixel_offset(x_axis_position, y_axis_position)]

    def clear_screen(self):
        """
        Turns off all the pixels on the screen (writes color 0 to all pixels).
        """
        self.screen_pixels = bytearray(self.screen_height * self.screen_width)

    def draw_sprite(self, x_axis_position, y_axis_position, sprite_bytes):
        """
        Draws a sprite via an XOR routine, meaning that if the target pixel
        is already turned on, and a pixel is set to be turned on at that same
        location via the draw, then the pixel is turned off. Bits that are 0
        in the sprite leave the screen untouched. The pixels wrap around when
        drawn off the edge of the screen. For example, the following bytes:

                       bit 7 6 5 4 3 2 1 0

           byte 0          0 1 1 1 1 1 0 0
           byte 1          0 1 0 0 0 0 0 0
           byte 2          0 1 1 1 1 1 0 0
           byte 3          0 1 0 0 0 0 0 0
           byte 4          0 1 1 1 1 1 0 0

        would draw an 'E' on the screen, with bit 7 as the leftmost pixel.

        :param x_axis_position: the X position of the sprite
        :param y_axis_position: the Y position of the sprite
        :param sprite_bytes: the rows of the sprite, top row first
        :return: True if a pixel that was on got turned off
        """
        collision = False
        for y_index, sprite_row in enumerate(sprite_bytes):
            y_coord = (y_axis_position + y_index) % self.screen_height

            for x_index in range(SPRITE_WIDTH):
                if not (sprite_row << x_index) & 0x80:
                    continue

                x_coord = (x_axis_position + x_index) % self.screen_width
                offset = y_coord * self.screen_width + x_coord
                if self.screen_pixels[offset] == PIXEL_ON:
                    collision = True
                self.screen_pixels[offset] ^= PIXEL_ON

        return collision

    def get_framebuffer(self):
        """
        Returns a snapshot of the screen as a tuple of rows. Each row is a
        bytes object with one 0 or 1 per pixel. Later draws do not change
        a snapshot that was already handed out.
        """
        return tuple(
            bytes(self.screen_pixels[row * self.screen_width:(row + 1) * self.screen_width])
            for row in range(self.screen_height))
