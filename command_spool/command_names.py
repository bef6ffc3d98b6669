"""
Command names understood by the collector.

Two of them are singletons: at most one spooled record per node.
"""

CommandReplaceCatalog = "replace catalog"
CommandReplaceFacts = "replace facts"
CommandDeactivateNode = "deactivate node"
CommandStoreReport = "store report"

ALL_COMMANDS = (
    CommandReplaceCatalog,
    CommandReplaceFacts,
    CommandDeactivateNode,
    CommandStoreReport,
)

# A newer catalog or fact set supersedes the older one for the same node.
SINGLETON_COMMANDS = frozenset([CommandReplaceCatalog, CommandReplaceFacts])


def is_singleton(name: str) -> bool:
    """True if a later enqueue for the same node overwrites the earlier one."""
    return name in SINGLETON_COMMANDS
