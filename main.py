# main.py

import pygame
import numpy as np
import logging

import constants
import logger_setup
from audio import AudioTrack
from sim_config import SimulationConfig, InvalidConfigError, load_config
from image_source import SourceImage
from simulation import Visualizer

# Get the application's dedicated logger
logger = logging.getLogger("dotwave")


def pointer_on_canvas(screen: pygame.Surface):
    """Returns the mouse position while it is over the window, otherwise None."""
    if not pygame.mouse.get_focused():
        return None
    x, y = pygame.mouse.get_pos()
    width, height = screen.get_size()
    if not (0 <= x < width and 0 <= y < height):
        return None
    return (x, y)


def handle_key(key, visualizer: Visualizer, track, controls: dict):
    """
    Keyboard replacements for the slider panel.

    UP/DOWN     dot size (rebuilds)
    RIGHT/LEFT  bass multiplier
    ]/[         chaos strength
    SPACE       play / pause
    """
    config = visualizer.config
    try:
        if key == pygame.K_UP:
            visualizer.set_dot_size(min(controls['dot_size_max'], config.dot_size + controls['dot_size_step']))
        elif key == pygame.K_DOWN:
            visualizer.set_dot_size(max(controls['dot_size_min'], config.dot_size - controls['dot_size_step']))
        elif key == pygame.K_RIGHT:
            visualizer.set_bass_multiplier(
                min(controls['bass_multiplier_max'], config.bass_multiplier + controls['bass_multiplier_step'])
            )
        elif key == pygame.K_LEFT:
            visualizer.set_bass_multiplier(
                max(controls['bass_multiplier_step'], config.bass_multiplier - controls['bass_multiplier_step'])
            )
        elif key == pygame.K_RIGHTBRACKET:
            visualizer.set_chaos_strength(
                min(controls['chaos_strength_max'], config.chaos_strength + controls['chaos_strength_step'])
            )
        elif key == pygame.K_LEFTBRACKET:
            visualizer.set_chaos_strength(max(0.0, config.chaos_strength - controls['chaos_strength_step']))
        elif key == pygame.K_SPACE and track is not None:
            track.toggle()
    except InvalidConfigError as e:
        # Key handlers clamp first; reaching this means config.json holds bad control limits.
        logger.error(f"Rejected control change: {e}")


def draw_frame(screen: pygame.Surface, visualizer: Visualizer, font: pygame.font.Font):
    screen.fill(constants.BLACK)
    width, height = screen.get_size()

    if not visualizer.has_content:
        message = font.render("Image failed to load! Check the file name and path.", True, constants.RED)
        screen.blit(message, message.get_rect(center=(width // 2, height // 2)))
        return

    # --- Glow pass: draw opaque, blur by down/up-scaling, add back dimmed ---
    glow_surface = pygame.Surface((width, height), pygame.SRCALPHA)
    visualizer.particles.draw(glow_surface, visualizer.audio_force, is_glow_pass=True)

    scale = constants.BLOOM_RADIUS
    scaled_size = (max(1, width // scale), max(1, height // scale))
    scaled_surface = pygame.transform.smoothscale(glow_surface, scaled_size)
    blurred_surface = pygame.transform.smoothscale(scaled_surface, (width, height))

    intensity = constants.BLOOM_INTENSITY
    blurred_surface.fill((intensity, intensity, intensity), special_flags=pygame.BLEND_RGB_MULT)
    screen.blit(blurred_surface, (0, 0), special_flags=pygame.BLEND_RGB_ADD)

    # --- Main pass with per-particle alpha ---
    particle_surface = pygame.Surface((width, height), pygame.SRCALPHA)
    visualizer.particles.draw(particle_surface, visualizer.audio_force, is_glow_pass=False)
    screen.blit(particle_surface, (0, 0))


def run_loop(screen, clock, visualizer: Visualizer, track, controls: dict):
    font = pygame.font.Font(None, 24)
    running = True

    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                else:
                    handle_key(event.key, visualizer, track, controls)
            elif event.type == pygame.VIDEORESIZE:
                screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                visualizer.resize((event.w, event.h))

        # --- Simulation ---
        bass = track.bass_energy() if track is not None else 0.0
        visualizer.step(bass, pointer_on_canvas(screen))

        # --- Logging (throttled) ---
        if visualizer.tick_count % constants.LOG_EVERY_TICKS == 0 and visualizer.has_content:
            particles = visualizer.particles
            logger.debug(
                f"Tick={visualizer.tick_count}, "
                f"Particles={particles.num_particles}, "
                f"Bass={bass:.1f}, "
                f"AudioForce={visualizer.audio_force:.3f}, "
                f"MeanDisplacement={particles.get_mean_displacement():.2f}, "
                f"Kinetic={particles.get_total_kinetic_energy():.2f}, "
                f"FPS={clock.get_fps():.1f}"
            )

        draw_frame(screen, visualizer, font)
        pygame.display.flip()
        clock.tick(constants.FPS)


def main():
    """
    Initializes pygame, loads the assets named in config.json and runs the visualizer
    until the window is closed.
    """
    # --- Setup ---
    logger_setup.setup_logging()
    config = load_config()

    logger.info("Application starting...")

    # Initialize the master random number generator (RNG)
    rng = np.random.default_rng(config['master_seed'])
    logger.info(f"Master RNG initialized with seed: {config['master_seed']}")

    # --- Initialization ---
    pygame.init()
    screen = pygame.display.set_mode((constants.WIDTH, constants.HEIGHT), pygame.RESIZABLE)
    pygame.display.set_caption(constants.TITLE)
    clock = pygame.time.Clock()

    assets = config['assets']
    image = SourceImage.load(assets['image_path'])
    track = AudioTrack.load(assets['music_path'])
    if track is not None:
        track.play()

    visualizer = Visualizer(
        image,
        screen.get_size(),
        SimulationConfig.from_dict(config['simulation']),
        rng,
    )

    run_loop(screen, clock, visualizer, track, config['controls'])

    logger.info("Application shutting down.")
    pygame.quit()

if __name__ == "__main__":
    main()
