"""Primary key ids for tenants, workflows, executions and tasks (CUID2)."""

from cuid2 import Cuid

CUID_LENGTH = 24

_cuid = Cuid(length=CUID_LENGTH)


def generate_cuid() -> str:
    return _cuid.generate()
