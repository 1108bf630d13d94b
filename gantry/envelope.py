"""
Gantry invocation envelope: condition, listeners and action, in a fixed order.

    condition false     -> ConditionRejectedError, nothing else runs
    before_call         -> every listener, registration order
    action              -> status code
    after_call          -> every listener, registration order (on success)
    after_throw         -> every listener, registration order (on failure),
                           then the original exception is re-raised
"""
import logging

from .faults import ConditionRejectedError

logger = logging.getLogger(__name__)


def _notify(command, hook, *arguments):
    for listener in command.listeners:
        if callable(method := getattr(listener, hook, None)):
            method(command, *arguments)


def _status(result):
    if result is None:
        return 1
    if isinstance(result, bool) or not isinstance(result, int):
        raise TypeError("action must return an int status code or None, got %r" % (result,))
    return result


def invoke(command, params, /):
    """
    Run a command's action on bound parameters and return its status code.

    An action returning None reports status 1.

    Raises
    - ConditionRejectedError when the condition says no.
    - Whatever a before_call listener raises, unchanged.
    - Whatever the action raises (including StopExecution and conversion
      errors), unchanged, once the after_throw listeners have run.
    """
    if params.command is not command:
        raise ValueError("invoke() parameters were bound to %r, not %r" % (params.command.name, command.name))

    if command.condition is not None and not command.condition(params):
        logger.debug("condition rejected %s", command.name)
        raise ConditionRejectedError(
            "You cannot use %s right now" % command.name,
            command=command,
            hint="the command's condition was not met",
        )

    _notify(command, "before_call", params)

    try:
        result = _status(command.action(params))
    except Exception as exception:
        logger.debug("%s failed with %s", command.name, type(exception).__name__)
        _notify(command, "after_throw", params, exception)
        raise

    logger.debug("%s returned %d", command.name, result)
    _notify(command, "after_call", params, result)
    return result


__all__ = (
    "invoke",
)
