import subprocess
import logging

logger = logging.getLogger(__name__)

FALLBACK_VERSION = "v1.0.0"


def _git(*args):
    return subprocess.check_output(
        ['git', *args],
        stderr=subprocess.DEVNULL,
        text=True
    ).strip()


def get_version():
    """Get version from the latest git tag, marking untagged or dirty trees."""
    try:
        tag = _git('describe', '--tags', '--abbrev=0')
        commit = _git('rev-parse', '--short', 'HEAD')
        tag_commit = _git('rev-list', '-n', '1', tag)[:7]
        dirty = subprocess.call(
            ['git', 'diff-index', '--quiet', 'HEAD', '--'],
            stderr=subprocess.DEVNULL
        ) != 0
    except (subprocess.CalledProcessError, FileNotFoundError):
        logger.debug(f"Could not determine version from git, using {FALLBACK_VERSION}")
        return FALLBACK_VERSION

    version = tag if commit == tag_commit else f"{tag}-{commit}"
    return f"{version}-dev" if dirty else version


__version__ = get_version()
