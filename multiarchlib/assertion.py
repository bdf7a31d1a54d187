"""
Assertions which raise an exception when a condition does not hold.
Used by exectools to turn non-zero exit codes into exceptions.
"""


def success(exitcode, msg):
    """
    Raise ChildProcessError if the exitcode indicates failure.
    """
    if exitcode != 0:
        raise ChildProcessError("Command returned non-zero exit status: {}".format(msg))
