from __future__ import annotations

import os

import pytest


def make_tree(root, spec):
    """
    Build files/dirs from a nested dict: str/bytes values are file contents,
    dict values are subdirectories.
    """
    for name, value in spec.items():
        p = root / name
        if isinstance(value, dict):
            p.mkdir()
            make_tree(p, value)
        elif isinstance(value, bytes):
            p.write_bytes(value)
        else:
            p.write_text(value)
    return root


@pytest.fixture
def tree(tmp_path):
    def build(spec):
        return make_tree(tmp_path, spec)
    return build


def symlinks_supported(tmp_path) -> bool:
    probe = tmp_path / ".probe-link"
    try:
        os.symlink(tmp_path, probe, target_is_directory=True)
    except (OSError, NotImplementedError, AttributeError):
        return False
    probe.unlink()
    return True


def hardlinks_supported(tmp_path) -> bool:
    src = tmp_path / ".probe-src"
    src.write_bytes(b"")
    try:
        os.link(src, tmp_path / ".probe-dst")
    except (OSError, AttributeError):
        src.unlink()
        return False
    (tmp_path / ".probe-dst").unlink()
    src.unlink()
    return True


@pytest.fixture
def need_symlinks(tmp_path):
    if not symlinks_supported(tmp_path):
        pytest.skip("symlinks not available")


@pytest.fixture
def need_hardlinks(tmp_path):
    if not hardlinks_supported(tmp_path):
        pytest.skip("hard links not available")
