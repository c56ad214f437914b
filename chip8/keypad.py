# The total number of keys on the Chip 8 hex keypad
NUM_KEYS = 0x10


class Keypad(object):
    """
    A class to emulate the Chip 8 hex keypad. The keypad has 16 keys labelled
    0 - F, laid out as follows:

        1 2 3 C
        4 5 6 D
        7 8 9 E
        A 0 B F

    Each key is simply up or down. There is no queuing of key presses, the
    last state written for a key is the one that is read back.
    """
    def __init__(self):
        self.keypad_keys = [False] * NUM_KEYS

    @staticmethod
    def check_key_index(key_index):
        if not 0 <= key_index < NUM_KEYS:
            raise ValueError("Key index out of range: {}".format(key_index))

    def set_key(self, key_index, key_down):
        """
        Sets the state of the specified key.

        :param key_index: the key to change (0x0 - 0xF)
        :param key_down: True if the key is held down, False otherwise
        """
        self.check_key_index(key_index)
        self.keypad_keys[key_index] = bool(key_down)

    def is_key_down(self, key_index):
        self.check_key_index(key_index)
        return self.keypad_keys[key_index]

    def any_key_down(self):
        """
        Returns the lowest numbered key that is currently held down, or None
        when no key is down.

        :return: the index of the key, or None
        """
        for key_index, key_down in enumerate(self.keypad_keys):
            if key_down:
                return key_index
        return None

    def release_all(self):
        self.keypad_keys = [False] * NUM_KEYS
