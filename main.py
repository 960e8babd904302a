#!/usr/bin/env python
"""
Confetti Maker CLI - Procedural falling-confetti animations

Usage:
    python main.py [options]

Examples:
    python main.py                                   # 10 frames of rainbow confetti
    python main.py -o party.gif --amount 80          # Denser confetti
    python main.py --shapes star,circle --colors "#FFD700,#C0C0C0"
    python main.py --mode emoji --shapes 🎉 🎊       # Emoji confetti
    python main.py --preset gold_rush -f spritesheet # Start from a preset
    python main.py --preview                         # Live preview window
"""

import argparse
import sys
from pathlib import Path


def build_settings(args) -> dict:
    """Raw settings from explicitly given CLI flags only"""
    settings = {}

    for name in ('amount', 'randomness', 'zoom', 'flutter'):
        value = getattr(args, name)
        if value is not None:
            settings[name] = value

    if args.frames is not None:
        settings['frame_count'] = args.frames
    if args.delay is not None:
        settings['frame_delay'] = args.delay
    if args.mode is not None:
        settings['shape_mode'] = args.mode
    if args.shapes:
        settings['shape_selection'] = [s for item in args.shapes for s in item.split(',') if s]
    if args.colors:
        if args.colors == ['multi']:
            settings['color_spec'] = 'multi'
        else:
            settings['color_spec'] = [c for item in args.colors for c in item.split(',') if c]
    if args.randomize_size:
        settings['randomize_size'] = True
    if args.randomize_rotation:
        settings['randomize_rotation'] = True
    if args.custom_path:
        custom = {'path': args.custom_path}
        if args.viewbox:
            custom['viewbox'] = args.viewbox
        settings['custom_shape'] = custom
    if args.seed is not None:
        settings['seed'] = args.seed

    return settings


def main():
    parser = argparse.ArgumentParser(
        description="Procedural falling-confetti animations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Shapes:
  standard mode: rectangle, square, circle, star, wave, custom
  emoji mode:    any emoji characters
  flag mode:     fr, de, it, nl, ua, jp, ie, be, ru, at, pl, id
                 or paths to flag images (see --flag-dir)

Colors:
  multi           - Built-in rainbow palette
  #RRGGBB / #RGB  - Hex colors (comma or space separated)

Examples:
  %(prog)s -o confetti.gif
  %(prog)s --amount 90 --flutter 80 --randomize-size --randomize-rotation
  %(prog)s --shapes custom --custom-path "M12 2 L22 22 L2 22 Z"
  %(prog)s --settings party.yaml --frames 20
  %(prog)s --list-presets                    # Show all presets
  %(prog)s --preset-info celebration         # Show preset details
        """
    )

    parser.add_argument(
        '-o', '--output',
        type=str,
        default=None,
        help='Output path (default: confetti.gif / confetti.png / confetti_frames)'
    )

    parser.add_argument(
        '-f', '--format',
        type=str,
        default='gif',
        choices=['gif', 'spritesheet', 'frames'],
        help='Output format (default: gif)'
    )

    # Confetti settings (unset flags keep preset / file / default values)
    parser.add_argument('--amount', type=float, default=None, help='Density 0-100 (default: 60)')
    parser.add_argument('--randomness', type=float, default=None, help='Variation 0-100 (default: 60)')
    parser.add_argument('--zoom', type=float, default=None, help='Particle size 10-50 (default: 10)')
    parser.add_argument('--flutter', type=float, default=None, help='Spin and tumble 0-100 (default: 50)')
    parser.add_argument('-n', '--frames', type=int, default=None, help='Number of frames 1-100 (default: 10)')
    parser.add_argument('--delay', type=int, default=None, help='Frame delay in ms 1-5000 (default: 50)')

    parser.add_argument(
        '--mode',
        type=str,
        default=None,
        choices=['standard', 'emoji', 'flag'],
        help='Shape family (default: standard)'
    )
    parser.add_argument('--shapes', type=str, nargs='+', default=None, help='Shape selection')
    parser.add_argument('--colors', type=str, nargs='+', default=None, help='"multi" or hex colors')
    parser.add_argument('--randomize-size', action='store_true', help='Vary particle size')
    parser.add_argument('--randomize-rotation', action='store_true', help='Random starting rotation')
    parser.add_argument('--custom-path', type=str, default=None, help='SVG path data for the "custom" shape')
    parser.add_argument('--viewbox', type=str, default=None, help='Viewbox of --custom-path (default: "0 0 24 24")')

    # Canvas
    parser.add_argument('--width', type=float, default=1440, help='Frame width (default: 1440)')
    parser.add_argument('--height', type=float, default=1024, help='Frame height (default: 1024)')
    parser.add_argument('--seed', type=int, default=None, help='Seed for a reproducible layout')

    # Resources
    parser.add_argument('--emoji-font', type=str, default=None, help='Font file used to draw emoji')
    parser.add_argument('--flag-dir', type=str, default=None, help='Directory with <ref>.png flag artwork')

    # Settings sources
    parser.add_argument('-p', '--preset', type=str, default=None, help='Start from a named preset')
    parser.add_argument('--settings', type=str, default=None, help='YAML file with settings')
    parser.add_argument('--save-preset', type=str, default=None, metavar='NAME',
                        help='Save the resulting settings as a user preset')
    parser.add_argument('--list-presets', action='store_true', help='List available presets')
    parser.add_argument('--preset-info', type=str, default=None, metavar='NAME', help='Show preset details')

    # Modes
    parser.add_argument('--preview', action='store_true', help='Open the live preview window (requires pygame)')
    parser.add_argument('--play', action='store_true', help='Play the generated frames in a window (requires pygame)')
    parser.add_argument('--empty-frame', action='store_true', help='Write a single empty frame')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show detailed progress and tracebacks')

    args = parser.parse_args()

    # Handle preset listing/info
    if args.list_presets:
        from confetti_maker.core.presets import get_preset_manager
        manager = get_preset_manager()

        print("Available Confetti Presets:\n")
        for tag in manager.list_tags():
            print(f"  [{tag.upper()}]")
            for name in manager.list_by_tag(tag):
                preset = manager.get(name)
                desc = preset.description[:50] + "..." if len(preset.description) > 50 else preset.description
                print(f"    {name:<20} - {desc}")
            print()

        print(f"Total: {len(manager.list_all())} presets")
        print("\nUsage: --preset <name>")
        print("Details: --preset-info <name>")
        sys.exit(0)

    if args.preset_info:
        from confetti_maker.core.presets import get_preset_manager
        manager = get_preset_manager()

        preset = manager.get(args.preset_info)
        if not preset:
            print(f"Error: Preset '{args.preset_info}' not found")
            print("Use --list-presets to see available presets")
            sys.exit(1)

        config = preset.config
        print(f"Preset: {preset.name}")
        print(f"Description: {preset.description}")
        print("\nSettings:")
        print(f"  Amount: {config.amount:g}")
        print(f"  Randomness: {config.randomness:g}")
        print(f"  Zoom: {config.zoom:g}")
        print(f"  Flutter: {config.flutter:g}")
        print(f"  Mode: {config.shape_mode.value}")
        print(f"  Shapes: {', '.join(config.shape_selection)}")
        print(f"  Colors: {'multi' if config.is_multicolor else len(config.color_spec)}")
        print(f"  Frames: {config.frame_count} @ {config.frame_delay}ms")
        print(f"\nTags: {', '.join(preset.tags)}")
        sys.exit(0)

    from confetti_maker import ConfettiSession, Bounds, normalize, merge_settings, load_settings
    from confetti_maker.core import (
        RasterRenderer, ConfettiExporter, get_preset, get_preset_manager,
        preview_settings, preview_sequence,
    )
    from confetti_maker.procedural import SequenceOrchestrator

    try:
        # Settings layers: preset < settings file < CLI flags
        layers = []
        if args.preset:
            preset = get_preset(args.preset)
            if not preset:
                print(f"Error: Preset '{args.preset}' not found")
                print("Use --list-presets to see available presets")
                sys.exit(1)
            print(f"Using preset: {args.preset} ({preset.description})")
            layers.append(preset.settings)

        if args.settings:
            layers.append(load_settings(args.settings))

        layers.append(build_settings(args))
        settings = merge_settings(*layers)
        config = normalize(settings)
        bounds = Bounds(args.width, args.height)

        if args.save_preset:
            manager = get_preset_manager()
            new_preset = manager.create_preset(args.save_preset, config, format=args.format)
            path = manager.save_preset(new_preset)
            print(f"Saved preset: {path}")

        renderer = RasterRenderer(emoji_font=args.emoji_font, flag_dir=args.flag_dir)

        # Live preview
        if args.preview:
            session = ConfettiSession(renderer=renderer, bounds=bounds, seed=args.seed)
            print("Opening preview window...")
            print("Controls: SPACE=play/pause, C=colors, Z/X=size, F/G=flutter, R=new layout, H=help, ESC=quit")
            preview_settings(session, settings)
            print("Preview closed.")
            return

        # Empty frame
        if args.empty_frame:
            session = ConfettiSession(renderer=renderer, bounds=bounds)
            pixels = session.generate_empty_frame()
            output = args.output or "empty_frame.png"
            ConfettiExporter.to_png(pixels, output)
            print(f"Output: {output}")
            return

        # Full generation
        orchestrator = SequenceOrchestrator(renderer)
        progress = None
        for progress in orchestrator.iter_sequence(config, bounds):
            if args.verbose and progress.frame_done and not progress.done:
                print(f"  Frame {progress.frame_index + 1}/{progress.frame_count} ({progress.fraction:.0%})")
        sequence = progress.output

        if progress.skipped:
            print(f"Warning: {progress.skipped} particle(s) could not be drawn")

        default_output = {
            'gif': "confetti.gif",
            'spritesheet': "confetti.png",
            'frames': "confetti_frames",
        }[args.format]
        output = args.output or default_output

        ConfettiExporter.export(sequence, output, args.format)
        print(f"Output: {Path(output)}")

        if args.play:
            preview_sequence(sequence.frames, sequence.delay_ms)

        print("Done!")

    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
