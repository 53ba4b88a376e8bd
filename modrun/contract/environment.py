"""Environment policy for plugin processes."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping


def build_environment(
    passthrough: Iterable[str],
    extra: Mapping[str, str] | None = None,
    source: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Build the environment a plugin runs with.

    Only variables named in ``passthrough`` are copied from ``source``
    (``os.environ`` by default), then ``extra`` is applied on top. Nothing
    else is inherited.
    """

    source = os.environ if source is None else source
    env = {name: source[name] for name in passthrough if name in source}
    if extra:
        env.update(extra)
    return env
