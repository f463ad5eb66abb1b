import argparse
import logging

import numpy as np
from PIL import Image

from ndimage_bridge import (
    ColorLayout,
    PixelBuffer,
    array_from_buffer,
    buffer_from_array,
    buffer_from_image,
    image_from_buffer,
)

_log = logging.getLogger(__file__)
logging.basicConfig(level=logging.INFO)


def put_red_dots(buffer: PixelBuffer) -> PixelBuffer:
    """Sets the red channel of every 2nd pixel in every 10th row to 255.

    The input buffer is left unchanged.
    """
    # Work on an owned copy, the view would write into the input
    pixels = np.array(array_from_buffer(buffer))
    pixels[::10, ::2, 0] = 255
    return buffer_from_array(pixels, ColorLayout.RGB)


def run(file: str, output: str) -> None:
    _log.info("Loading %s", file)
    with Image.open(file) as image:
        buffer = buffer_from_image(image.convert("RGB"))
    _log.info("Putting red dots on a %ix%i image", buffer.width, buffer.height)
    result = put_red_dots(buffer)
    image_from_buffer(result).save(output)
    _log.info("Saved %s", output)
    return


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Loads an image and puts red dots on it.")
    parser.add_argument("file", help="File to put red dots on.")
    parser.add_argument("output", help="Output file with red dots.")
    args = parser.parse_args()
    run(args.file, args.output)
