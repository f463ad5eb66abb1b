import argparse
import logging

from PIL import Image

from ndimage_bridge import (
    PixelBuffer,
    array_from_buffer,
    buffer_from_image,
    image_from_buffer,
)

_log = logging.getLogger(__file__)
logging.basicConfig(level=logging.INFO)


def put_white_dots(buffer: PixelBuffer) -> None:
    """Sets every 2nd pixel in every 10th row of a grayscale buffer to 255, in place."""
    pixels = array_from_buffer(buffer)
    pixels[::10, ::2] = 255
    return


def run(file: str, output: str) -> None:
    _log.info("Loading %s", file)
    with Image.open(file) as image:
        buffer = buffer_from_image(image.convert("L"))
    _log.info("Putting white dots on a %ix%i image", buffer.width, buffer.height)
    put_white_dots(buffer)
    image_from_buffer(buffer).save(output)
    _log.info("Saved %s", output)
    return


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Loads an image and puts white dots on it.")
    parser.add_argument("file", help="File to put white dots on.")
    parser.add_argument("output", help="Output file with white dots.")
    args = parser.parse_args()
    run(args.file, args.output)
