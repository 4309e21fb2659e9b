from rich.pretty import pprint

from arbor import *

root = basic_root("sync", usage="sync [options] command", summary="keeps two locations in sync")


@flag("v", "verbose", "be verbose", multiple=True)
def verbose(value, command):
    pass


@root.command(
    usage="push [options] source target",
    summary="pushes source onto target",
    options=[verbose, OptionDefinition("n", "retries", "retry count", "optional", default=3, transform=int)],
    params=[param("source"), param("target")],
)
def push(options, arguments, command):
    """
    Copy every entry of the source location onto the target location,
    overwriting what is already there.
    """
    pprint({"options": options, "arguments": arguments.to_list()})


if __name__ == '__main__':
    invoke(root)
