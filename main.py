import logging

from rich.pretty import pprint

from gantry import *

__prog__ = "clipboard"

ENTITIES = Flag("e", "Also cut entities")
MASK = ValueFlag("m", "Set the include mask, non-matching blocks become air", metavar="mask")
LEAVE_ID = Argument("leaveId", "The block to leave", default=["air"])

registry = Registry(deferred=True)


@registry.register
@command(
    "cut", "/cut",
    descr="Cut the selection to the clipboard",
    footer="WARNING: Cutting and pasting entities cannot be undone!",
    parts=[ENTITIES, MASK, LEAVE_ID],
    listeners=[listener(
        before=lambda command, params: logging.info("running %s", command.name),
        after_throw=lambda command, params, exception: logging.warning("%s failed: %s", command.name, exception),
    )],
)
def cut(params):
    pprint({"entities": ENTITIES(params), "mask": MASK(params), "leaveId": LEAVE_ID(params)})
    return 0


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG)
    registry.seal()
    pprint(cut)
    for prompt in ("cut -e -m stone", "cut -m stone block", "cut -m", "cut -x a b"):
        try:
            registry.dispatch(prompt)
        except (CommandException, UsageExit) as fault:
            render(fault)
