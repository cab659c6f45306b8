"""Main entry point for odysis."""

import argparse
import logging
from pathlib import Path

import numpy as np

from .config import ViewerConfig, load_config
from .core.block import Block
from .core.errors import UnknownField
from .core.scene import Scene
from .effects import IsoColor, IsoSurface, Threshold
from .logging_config import setup_logging
from .scenes import create_cube_mesh, create_wave_mesh
from .viewer import Renderer

# Dataset registry - maps names to (mesh factory, default input field)
DATASETS = {
    "cube": (create_cube_mesh, "temperature"),
    "wave": (create_wave_mesh, "height"),
}

EFFECTS = ["none", "isocolor", "isosurface", "threshold"]


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        description="Odysis - interactive mesh data visualization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-s", "--scene",
        choices=list(DATASETS.keys()),
        default="cube",
        help="Dataset to display (default: cube)",
    )
    parser.add_argument(
        "-e", "--effect",
        choices=EFFECTS,
        default="isocolor",
        help="Effect applied to the dataset (default: isocolor)",
    )
    parser.add_argument(
        "--input",
        metavar="FIELD",
        help="Data name the effect reads (default: the dataset's main field)",
    )
    parser.add_argument("--min", type=float, help="Lower bound for isocolor/threshold")
    parser.add_argument("--max", type=float, help="Upper bound for isocolor/threshold")
    parser.add_argument("--value", type=float, help="Iso-value for isosurface")
    parser.add_argument(
        "-r", "--render",
        metavar="PATH",
        help="Render the scene to an image file and quit",
    )
    parser.add_argument(
        "--resolution",
        metavar="WxH",
        help="Render resolution (default: from config, 800x600)",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="YAML file with viewer defaults",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log recomputes and scene updates",
    )
    return parser


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def build_scene(args: argparse.Namespace, config: ViewerConfig) -> Scene:
    """Create the dataset and the requested effect as a Scene."""
    factory, default_field = DATASETS[args.scene]
    mesh = factory()
    mesh.default_color = config.default_color
    mesh.default_alpha = config.default_alpha
    field = args.input or default_field

    values = mesh.get_data(field).components[0].array
    low = float(np.min(values)) if args.min is None else args.min
    high = float(np.max(values)) if args.max is None else args.max

    effect: Block | None = None
    if args.effect == "isocolor":
        effect = IsoColor(mesh, field, min=low, max=high, colormap=config.colormap)
    elif args.effect == "isosurface":
        value = (low + high) / 2 if args.value is None else args.value
        effect = IsoSurface(mesh, field, value=value)
    elif args.effect == "threshold":
        effect = Threshold(mesh, field, min=low, max=(low + high) / 2 if args.max is None else high)

    if effect is None:
        return Scene([mesh], background_color=config.background_color)
    if args.effect == "isocolor":
        return Scene([effect], background_color=config.background_color)
    # Show the source faintly behind geometry-producing effects
    mesh.default_alpha = 0.2
    return Scene([mesh, effect], background_color=config.background_color)


def main(argv=None) -> None:
    """Run the odysis viewer."""
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config(args.config)
    setup_logging(logging.DEBUG if args.verbose else config.log_level)

    try:
        scene = build_scene(args, config)
    except UnknownField as e:
        parser.error(f"--input: {e}")

    # Display scene info
    print("Odysis - Mesh Data Visualization")
    print("=" * 40)
    print(f"Scene contains {len(scene)} blocks (scale {scene.scale:.4g}):")
    for block in scene.iter_blocks():
        print(f"  - {block!r}")

    width, height = config.width, config.height
    if args.resolution:
        width, height = map(int, args.resolution.split("x"))
    renderer = Renderer(scene, width=width, height=height)

    if args.render:
        output_path = Path(args.render)
        print(f"\nRendering to {output_path} ({width}x{height})...")
        try:
            renderer.save(output_path)
        finally:
            renderer.dispose()
        print(f"Saved render to {output_path}")
    else:
        print("\nOpening viewer...")
        print("Controls: Left-drag to rotate, scroll to zoom, right-drag to pan")
        renderer.show()


if __name__ == "__main__":
    main()
