import os
import pathlib
import re

import setuptools

__packagename__ = "ndimage_bridge"
ROOT = pathlib.Path(__file__).parent


def get_version():
    VERSIONFILE = os.path.join(__packagename__, "__init__.py")
    initfile_lines = open(VERSIONFILE, "rt").readlines()
    VSRE = r"^__version__ = ['\"]([^'\"]*)['\"]"
    for line in initfile_lines:
        mo = re.search(VSRE, line, re.M)
        if mo:
            return mo.group(1)
    raise RuntimeError(f"Unable to find version string in {VERSIONFILE}.")


__version__ = get_version()


setuptools.setup(
    name="ndimage-bridge",
    packages=setuptools.find_packages(),
    version=__version__,
    description="Zero-copy conversion between NumPy image arrays and packed pixel buffers.",
    long_description=open(ROOT / "README.md").read(),
    long_description_content_type="text/markdown",
    license="MIT",
    classifiers=[
        "Programming Language :: Python",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    ],
    python_requires=">=3.9",
    install_requires=open(pathlib.Path(ROOT, "requirements.txt")).readlines(),
    extras_require={"test": ["pytest"]},
    package_data={__packagename__: ["py.typed"]},
)
