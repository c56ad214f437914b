import argparse
import logging
import os
import random
import sys

import pygame

from chip8.config import load_config, validate_config
from chip8.cpu import CPU
from chip8.exception import Chip8Exception
from chip8.screen import SCREEN_HEIGHT, SCREEN_WIDTH
from chip8.window import Window, translate_key

logger = logging.getLogger(__name__)

# The number of frames drawn per second, which is also the rate the timers tick
FRAMES_PER_SECOND = 60

# The configuration file read from the working directory when -c is not given
DEFAULT_CONFIG_FILE = "config.toml"


def handle_events(project_cpu):
    """
    Pushes the key state from the pygame event queue into the CPU.

    :param project_cpu: the CPU to update
    :return: False once the user asked to quit
    """
    running = True
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            running = False
        elif event.type in (pygame.KEYDOWN, pygame.KEYUP):
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                running = False
            key_index = translate_key(event.key)
            if key_index is not None:
                project_cpu.cpu_set_key(key_index, event.type == pygame.KEYDOWN)
    return running


def run_frame(project_cpu, project_window, cycles_per_frame, playing):
    """
    Runs one frame: a batch of instructions, a single timer tick and a
    redraw of the window.

    :param project_cpu: the CPU to run
    :param project_window: the window to draw on
    :param cycles_per_frame: the number of instructions to run
    :param playing: whether the sound was on at the end of the last frame
    :return: whether the sound is on at the end of this frame
    """
    for _ in range(cycles_per_frame):
        project_cpu.cpu_execute_instruction()

    project_cpu.cpu_decrement_timers()
    project_window.draw_framebuffer(project_cpu.cpu_read_framebuffer())

    if project_cpu.cpu_should_play_sound() != playing:
        playing = not playing
        logger.debug("Sound {}".format("started" if playing else "stopped"))
    return playing


def screen_cpu_connector(project_cpu, project_window, cycles_per_frame):
    """
    Runs the main emulator loop until the user quits, one frame at a time.

    :param project_cpu: the CPU to run
    :param project_window: the window to draw on
    :param cycles_per_frame: the number of instructions to run each frame
    """
    clock = pygame.time.Clock()
    playing = False

    while handle_events(project_cpu):
        playing = run_frame(project_cpu, project_window, cycles_per_frame, playing)
        clock.tick(FRAMES_PER_SECOND)


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="Starts a simple Chip 8 emulator"
                    )
    parser.add_argument(
        "rom", nargs="?", help="the ROM file to load on startup "
                               "(default is the rom named in the config file)")
    parser.add_argument(
        "-c", "--config", help="the TOML configuration file to read "
                               "(default is config.toml, when it exists)", dest="config")
    parser.add_argument(
        "-s", help="the scale factor to apply to the display", type=int, dest="scale")
    parser.add_argument(
        "-n", help="the number of instructions to execute per frame",
        type=int, dest="cycles_per_frame")
    parser.add_argument(
        "--seed", help="seed for the random number generator", type=int, dest="seed")
    parser.add_argument(
        "-v", help="log debugging output", action="store_true", dest="verbose")
    return parser.parse_args(argv)


def build_config(args):
    """
    Reads the configuration file and applies the command-line overrides.
    Without -c, a config.toml in the working directory is used if present.
    """
    config_file = args.config
    if config_file is None and os.path.isfile(DEFAULT_CONFIG_FILE):
        config_file = DEFAULT_CONFIG_FILE
    config = load_config(config_file)
    if args.rom is not None:
        config['rom'] = args.rom
    if args.scale is not None:
        config['scale'] = args.scale
    if args.cycles_per_frame is not None:
        config['cycles_per_frame'] = args.cycles_per_frame
    validate_config(config)
    return config


def main(argv=None):
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s]:  %(message)s", stream=sys.stdout)

    try:
        config = build_config(args)
    except (Chip8Exception, OSError) as error:
        logger.error(error)
        return 1
    if config['rom'] is None:
        logger.error("No ROM given on the command line or in the config file")
        return 1

    try:
        project_cpu = CPU.from_rom_file(config['rom'], rng=random.Random(args.seed))
    except (Chip8Exception, OSError) as error:
        logger.error(error)
        return 1

    pygame.init()
    project_window = Window(SCREEN_WIDTH, SCREEN_HEIGHT, config['scale'],
                            config['color']['back'], config['color']['front'])
    project_window.init_display()
    try:
        screen_cpu_connector(project_cpu, project_window, config['cycles_per_frame'])
    except Chip8Exception as error:
        logger.error("{}\n{}".format(error, project_cpu))
        return 1
    finally:
        project_window.close()
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
