import os
from runpy import run_path

from setuptools import setup


def get_version():
    """
    Get the version of the project as declared by
    :py:`_storageallowance.__version__`.
    """
    version_path = os.path.join(
        os.path.dirname(__file__), "src/_storageallowance/__init__.py"
    )
    context = run_path(version_path)
    return context["__version__"]


setup(
    version=get_version(),
)
