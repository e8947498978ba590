import re
from importlib import metadata


def test_package_version_is_semver():
    import recordtail
    assert re.match(r"^\d+\.\d+\.\d+", recordtail.__version__), recordtail.__version__


def test_package_version_matches_metadata():
    import recordtail
    try:
        installed = metadata.version("recordtail")
    except metadata.PackageNotFoundError:  # running from a source checkout
        return
    assert recordtail.__version__ == installed
