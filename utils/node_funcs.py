# utils/node_funcs.py
import re
import time

# characters the ISY will not accept in node addresses or names
_INVALID_CHARS = re.compile(r"[<>`~!@#$%^&*(){}\[\]?/\\;:\"']")


def get_valid_node_address(name, max_length=14):
    """
    Returns a node address the ISY accepts: invalid characters removed,
    lowercase, and at most max_length characters kept from the end.
    """
    address = _INVALID_CHARS.sub('', name).lower()
    return address[-max_length:] if max_length else ''


def get_valid_node_name(name, max_length=32):
    """
    Returns a node name the ISY accepts: invalid characters removed, case
    kept, and at most max_length characters kept from the end.
    """
    valid = _INVALID_CHARS.sub('', name)
    return valid[-max_length:] if max_length else ''


def time_node_address(prefix='pvs', max_length=14, now=None):
    """
    Returns a unique-in-practice node address derived from the current time
    in milliseconds. The prefix is kept, the oldest digits are dropped to fit.
    """
    if now is None:
        now = time.time()
    digits = str(int(now * 1000))
    keep = max_length - len(prefix)
    return get_valid_node_address(f"{prefix}{digits[-keep:]}", max_length)
