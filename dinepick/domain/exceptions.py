"""Root of the DinePick exception tree."""


class DinePickError(Exception):
    """Raised for every failure the plan core reports on purpose.

    Callers that map failures onto transport codes can catch this one
    class; anything else escaping the core is a bug.
    """
