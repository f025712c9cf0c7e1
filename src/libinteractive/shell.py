"""Spawn common interactive programs through a spawner."""

from __future__ import annotations

import logging
import os
import typing as t

if t.TYPE_CHECKING:
    from libinteractive.context import Context
    from libinteractive.expecter import ExpectOptions
    from libinteractive.spawner import Spawner

logger = logging.getLogger(__name__)

#: Shell used by :func:`spawn_shell` when ``$SHELL`` is unset.
DEFAULT_SHELL = "sh"
#: Binary invoked by :func:`spawn_ssh`.
SSH_COMMAND = "ssh"
#: Binary invoked by :func:`spawn_oc`.
OC_COMMAND = "oc"


def spawn_shell(
    spawner: Spawner,
    timeout: float | None,
    options: ExpectOptions | None = None,
    shell: str | None = None,
) -> Context:
    """Spawn an interactive shell.

    Uses ``shell``, else ``$SHELL``, else :data:`DEFAULT_SHELL`.
    """
    program = shell or os.getenv("SHELL") or DEFAULT_SHELL
    logger.debug("Spawning shell %s", program)
    return spawner.spawn(program, [], timeout, options)


def spawn_ssh(
    spawner: Spawner,
    user: str,
    host: str,
    timeout: float | None,
    options: ExpectOptions | None = None,
) -> Context:
    """Spawn an ssh session to ``user@host``."""
    destination = f"{user}@{host}"
    logger.debug("Spawning ssh session to %s", destination)
    return spawner.spawn(SSH_COMMAND, [destination], timeout, options)


def spawn_oc(
    spawner: Spawner,
    pod: str,
    container: str,
    namespace: str,
    timeout: float | None,
    options: ExpectOptions | None = None,
) -> Context:
    """Spawn a shell inside ``container`` of ``pod`` via ``oc exec``."""
    args = ["exec", "-i", pod, "-c", container, "-n", namespace, "--", "sh"]
    logger.debug("Spawning oc session in %s/%s", namespace, pod)
    return spawner.spawn(OC_COMMAND, args, timeout, options)
