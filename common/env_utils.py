# common/env_utils.py
# -*- coding: utf-8 -*-
"""
Environment variable persistence.

Provisioners never touch ``os.environ`` or profile files directly; they go
through an :class:`EnvironmentStore` so tests can substitute an in-memory
store. Three scopes exist: the running process, the invoking user and the
whole machine. Persisted scopes are written as ``export`` lines in a shell
profile fragment that login shells source.
"""

import enum
import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from provisioning.errors import EnvPersistenceFailure
from settings import config as static_config

module_logger = logging.getLogger(__name__)

PATH_VARIABLE = "PATH"
INHERITED_PATH = "$PATH"

_EXPORT_LINE = re.compile(r'^export ([A-Za-z_][A-Za-z0-9_]*)="(.*)"$')


class EnvScope(str, enum.Enum):
    PROCESS = "process"
    USER = "user"
    MACHINE = "machine"


class EnvironmentStore(ABC):
    """Read/write access to environment variables per scope."""

    @abstractmethod
    def get(self, name: str, scope: EnvScope) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, name: str, value: str, scope: EnvScope) -> None:
        """
        Raises:
            EnvPersistenceFailure: If the scope cannot be written.
        """
        pass


class InMemoryEnvironmentStore(EnvironmentStore):
    """Dictionary-backed store; scopes listed in ``read_only`` refuse writes."""

    def __init__(self, read_only: Tuple[EnvScope, ...] = ()):
        self.values: Dict[EnvScope, Dict[str, str]] = {
            scope: {} for scope in EnvScope
        }
        self.read_only = set(read_only)

    def get(self, name: str, scope: EnvScope) -> Optional[str]:
        return self.values[scope].get(name)

    def set(self, name: str, value: str, scope: EnvScope) -> None:
        if scope in self.read_only:
            raise EnvPersistenceFailure(
                f"Scope '{scope.value}' is read-only; cannot set {name}"
            )
        self.values[scope][name] = value


def _escape(value: str) -> str:
    return (
        value.replace("\\", "\\\\").replace('"', '\\"').replace("`", "\\`")
    )


def _unescape(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


class ProfileEnvironmentStore(EnvironmentStore):
    """
    Process scope maps to ``os.environ``; user and machine scopes map to
    shell profile fragments.
    """

    def __init__(
        self,
        user_file: Union[str, Path] = static_config.USER_ENV_FILE,
        machine_file: Union[str, Path] = static_config.MACHINE_ENV_FILE,
    ):
        self.files: Dict[EnvScope, Path] = {
            EnvScope.USER: Path(user_file),
            EnvScope.MACHINE: Path(machine_file),
        }

    def _read_exports(self, scope: EnvScope) -> Dict[str, str]:
        path = self.files[scope]
        if not path.is_file():
            return {}
        exports: Dict[str, str] = {}
        for line in path.read_text(encoding="utf-8").splitlines():
            match = _EXPORT_LINE.match(line.strip())
            if match:
                exports[match.group(1)] = _unescape(match.group(2))
        return exports

    def get(self, name: str, scope: EnvScope) -> Optional[str]:
        if scope is EnvScope.PROCESS:
            return os.environ.get(name)
        return self._read_exports(scope).get(name)

    def set(self, name: str, value: str, scope: EnvScope) -> None:
        if scope is EnvScope.PROCESS:
            os.environ[name] = value
            return
        path = self.files[scope]
        try:
            exports = self._read_exports(scope)
            exports[name] = value
            lines = ["# Managed by kraft-provisioner; regenerated on each run."]
            lines.extend(
                f'export {key}="{_escape(val)}"' for key, val in exports.items()
            )
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as e:
            raise EnvPersistenceFailure(
                f"Could not write {name} to {scope.value} scope ({path}): {e}"
            ) from e


def build_search_path(
    current: Optional[str], bin_dir: Union[str, Path], stale_root: Union[str, Path]
) -> str:
    """
    Prepend ``bin_dir`` to a PATH-style value, dropping every entry that
    points into ``stale_root`` and any duplicate of ``bin_dir``.
    """
    new_entry = str(bin_dir)
    stale_prefix = str(stale_root).rstrip(os.sep) + os.sep
    kept: List[str] = []
    for entry in (current or "").split(os.pathsep):
        if not entry or entry == new_entry:
            continue
        if entry == str(stale_root) or entry.startswith(stale_prefix):
            continue
        kept.append(entry)
    return os.pathsep.join([new_entry] + kept)


def _persist(
    store: EnvironmentStore,
    name: str,
    compute_process: Callable[[Optional[str]], str],
    compute: Callable[[Optional[str]], str],
    logger: logging.Logger,
) -> EnvScope:
    store.set(name, compute_process(store.get(name, EnvScope.PROCESS)), EnvScope.PROCESS)
    try:
        store.set(name, compute(store.get(name, EnvScope.MACHINE)), EnvScope.MACHINE)
    except EnvPersistenceFailure as machine_err:
        logger.warning(
            f"Machine-scope write of {name} failed ({machine_err}); falling back to user scope"
        )
        try:
            store.set(name, compute(store.get(name, EnvScope.USER)), EnvScope.USER)
        except EnvPersistenceFailure as user_err:
            raise EnvPersistenceFailure(
                f"Could not persist {name} at machine scope ({machine_err}) "
                f"or user scope ({user_err})"
            ) from user_err
        return EnvScope.USER

    # User profiles are sourced after the machine one; an older user value
    # would shadow the machine value.
    user_value = store.get(name, EnvScope.USER)
    if user_value is not None:
        try:
            store.set(name, compute(user_value), EnvScope.USER)
        except EnvPersistenceFailure as user_err:
            raise EnvPersistenceFailure(
                f"Persisted {name} at machine scope but could not update the "
                f"user-scope value that overrides it ({user_err})"
            ) from user_err
    return EnvScope.MACHINE


def persist_variable(
    store: EnvironmentStore,
    name: str,
    value: str,
    logger: Optional[logging.Logger] = None,
) -> EnvScope:
    """
    Set ``name`` in the process, then persist it at machine scope, falling
    back to user scope when the machine write is refused.

    Returns:
        The persistent scope that accepted the value.

    Raises:
        EnvPersistenceFailure: If neither persistent scope could be written.
    """
    def compute(_current: Optional[str]) -> str:
        return value

    return _persist(store, name, compute, compute, logger or module_logger)


def persist_search_path(
    store: EnvironmentStore,
    bin_dir: Union[str, Path],
    stale_root: Union[str, Path],
    logger: Optional[logging.Logger] = None,
) -> EnvScope:
    """
    Make ``bin_dir`` take precedence on PATH in every scope that can be
    written, removing references into ``stale_root``.

    Persisted scopes that have no PATH yet extend the inherited ``$PATH``.
    """

    def compute(current: Optional[str]) -> str:
        return build_search_path(current, bin_dir, stale_root)

    def compute_persisted(current: Optional[str]) -> str:
        return build_search_path(current or INHERITED_PATH, bin_dir, stale_root)

    return _persist(
        store, PATH_VARIABLE, compute, compute_persisted, logger or module_logger
    )
