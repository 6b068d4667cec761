import argparse
import math
import sys

from phongcast.common import Settings
from phongcast.cpu_rt import CpuApp
from phongcast.jit_rt import JitApp
from phongcast.ppm import ImageWriteError

import matplotlib.pyplot as plt


def main(argv=None):
    parser = argparse.ArgumentParser(description="Render the sphere scene to a PPM image")
    backend = parser.add_mutually_exclusive_group()
    backend.add_argument("--cpu", action="store_true", help="Use the pure-Python renderer (default)")
    backend.add_argument("--jit", action="store_true", help="Use the numba-compiled parallel renderer")

    parser.add_argument("--width", type=int, default=1024, help="Image width")
    parser.add_argument("--height", type=int, default=768, help="Image height")
    parser.add_argument("--fov", type=float, default=90.0, help="Field of view in degrees")
    parser.add_argument("--workers", type=int, default=1, help="Processes used by the CPU renderer")
    parser.add_argument("--output", default="render.ppm", help="Output image path")
    parser.add_argument("--verbose", action="store_true", help="Print render progress")
    parser.add_argument("--show", action="store_true", help="Display the image once rendered")

    args = parser.parse_args(argv)

    try:
        settings = Settings(
            width=args.width,
            height=args.height,
            fov=math.radians(args.fov),
            output=args.output,
            workers=args.workers,
            verbose=args.verbose,
        )
    except ValueError as e:
        parser.error(str(e))

    if args.jit:
        app = JitApp(settings)
    else:
        app = CpuApp(settings)

    app.run()

    try:
        path = app.save()
    except ImageWriteError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"Run success! Image saved to {path}")

    if args.show:
        plt.imshow(app.image)
        plt.show(block=True)

    return 0


if __name__ == "__main__":
    sys.exit(main())
