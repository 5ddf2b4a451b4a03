"""Command implementations — list groups and watch an asset root.

Both commands read configuration via ``load_config`` so ``assetwatch.yaml``
settings apply, with explicit keyword arguments taking precedence.
"""

from __future__ import annotations

import sys
import threading
import time
from pathlib import Path
from typing import TYPE_CHECKING

from assetwatch._errors import AssetWatchError
from assetwatch.cache import MemoryCacheStore
from assetwatch.config_loader import load_config
from assetwatch.model.factory import YamlModelProvider
from assetwatch.model.resource import CacheKey, ResourceType
from assetwatch.service import WatchService
from assetwatch.watcher.core import ResourceWatcher
from assetwatch.watcher.listener import CallbackListener

if TYPE_CHECKING:
    from assetwatch.model.resource import Model


def list_groups(
    root: str | Path = ".",
    *,
    model_file: str | None = None,
) -> int:
    """Print every group and its resources to stdout.

    Returns a process exit code.

    """
    config = load_config(Path(root), model_file=model_file)
    try:
        model = YamlModelProvider(config.model_path).current_model()
    except AssetWatchError as exc:
        print(f"  Model error: {exc}", file=sys.stderr)
        return 1

    for name in model.group_names:
        group = model.group(name)
        scripts = len(group.resources_of(ResourceType.SCRIPT))
        sheets = len(group.resources_of(ResourceType.STYLESHEET))
        print(f"{name} ({scripts} js, {sheets} css)")
        for resource in group.resources:
            print(f"  [{resource.type.value}] {resource.uri}")
    return 0


def watch(
    root: str | Path = ".",
    *,
    model_file: str | None = None,
    hash_algorithm: str | None = None,
    verbose: bool | None = None,
    stop_event: threading.Event | None = None,
) -> int:
    """Watch *root* and report every group invalidation until interrupted.

    One cache key is registered per group in the model at startup.
    Returns a process exit code.

    """
    from assetwatch.banner import print_banner

    config = load_config(
        Path(root),
        model_file=model_file,
        hash_algorithm=hash_algorithm,
        verbose=verbose or None,
    )
    try:
        model = YamlModelProvider(config.model_path).current_model()
        watcher = ResourceWatcher.from_config(
            config,
            MemoryCacheStore(),
            listener=CallbackListener(
                on_resource=lambda r: print(f"  changed: {r.uri}", file=sys.stderr),
                on_group=lambda k: print(f"  invalidated: {k}", file=sys.stderr),
            ),
        )
    except AssetWatchError as exc:
        print(f"  Startup error: {exc}", file=sys.stderr)
        return 1

    service = WatchService(watcher, config, (CacheKey(name) for name in model.group_names))

    t0 = time.perf_counter()
    service.start()
    prime_ms = (time.perf_counter() - t0) * 1000
    print_banner(
        config,
        group_count=len(model.group_names),
        resource_count=len(watcher.baseline),
        prime_ms=prime_ms,
        warnings=_startup_warnings(model),
    )

    stop = stop_event if stop_event is not None else threading.Event()
    try:
        stop.wait()
    except KeyboardInterrupt:
        pass
    finally:
        service.stop()
    return 0


def _startup_warnings(model: Model) -> list[str]:
    return [
        f"group {name!r} has no resources"
        for name in model.group_names
        if not model.group(name).resources
    ]
