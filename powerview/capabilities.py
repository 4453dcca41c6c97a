"""Capability command table for the shade node.

Each (capability, command) pair the home-automation side can send is mapped
to the host command id and the name of the node method handling it.
buildCommands() turns the table into the `commands` dict the host dispatches
on, and refuses a table that names a missing handler.

(C) 2025 Stephen Jenkins
"""

CAP_WINDOW_SHADE = 'windowShade'
CAP_WINDOW_SHADE_LEVEL = 'windowShadeLevel'
CAP_CALIBRATE = 'calibrate'
CAP_JOG = 'jog'
CAP_CREATE_ANOTHER = 'createAnotherDevice'
CAP_REFRESH = 'refresh'

SHADE_COMMANDS = {
    (CAP_WINDOW_SHADE, 'open'): ('OPEN', 'cmdOpen'),
    (CAP_WINDOW_SHADE, 'close'): ('CLOSE', 'cmdClose'),
    (CAP_WINDOW_SHADE, 'pause'): ('STOP', 'cmdPause'),
    (CAP_WINDOW_SHADE_LEVEL, 'setShadeLevel'): ('SETLVL', 'cmdSetLevel'),
    (CAP_CALIBRATE, 'push'): ('CALIBRATE', 'cmdCalibrate'),
    (CAP_JOG, 'push'): ('JOG', 'cmdJog'),
    (CAP_CREATE_ANOTHER, 'push'): ('CREATE', 'cmdCreateAnother'),
    (CAP_REFRESH, 'refresh'): ('QUERY', 'query'),
}


def buildCommands(node_class, table):
    """Validates a command table against a node class.

    Args:
        node_class (type): the node class holding the handlers.
        table (dict): {(capability, command): (host_cmd, handler_name)}.

    Returns:
        dict: {host_cmd: function}, as the host expects in Node.commands.

    Raises:
        ValueError: a key is not a (capability, command) pair, a handler is
            missing or not callable, or a host command id is used twice.
    """
    commands = {}
    for key, (host_cmd, handler_name) in table.items():
        if not (isinstance(key, tuple) and len(key) == 2 and all(key)):
            raise ValueError(f"command key must be (capability, command): {key!r}")
        handler = getattr(node_class, handler_name, None)
        if not callable(handler):
            raise ValueError(f"{node_class.__name__} has no handler {handler_name} for {key}")
        if host_cmd in commands:
            raise ValueError(f"host command {host_cmd} mapped twice")
        commands[host_cmd] = handler
    return commands


def lookup(table, capability, command):
    """Returns the (host_cmd, handler_name) for a capability command.

    Raises:
        KeyError: the pair is not in the table.
    """
    return table[(capability, command)]
