import pprint


class Error(Exception):
    """Base class for every error lockstamp knows how to report"""

    def print_error(self) -> None:
        pass

    def __str__(self) -> str:
        pp = pprint.PrettyPrinter(indent=2)
        return "%s(%s)" % (type(self).__name__, pp.pformat(vars(self)))
