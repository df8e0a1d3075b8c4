DEFAULT_ACTIVITY_CAPACITY = 20
DEFAULT_PEER_ACTIVITY_PROBABILITY = 0.1
SYSTEM_ACTOR_NAME = "System"
DEFAULT_AVATAR_REF = "https://images.pexels.com/photos/614810/pexels-photo-614810.jpeg?auto=compress&cs=tinysrgb&w=400"

# Board columns in display order: status value -> column header.
COLUMN_TITLES = {
    "todo": "To Do",
    "in-progress": "In Progress",
    "done": "Done",
}

# Titles a task may not take (compared case-insensitively).
RESERVED_TITLES = tuple(COLUMN_TITLES) + tuple(COLUMN_TITLES.values())

MERGE_SEPARATOR = "\n\n"
