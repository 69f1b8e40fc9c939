"""Access to a running (or built) Storybook: index, port detection, introspection."""

from .index_client import (
    INDEX_FILES,
    StoryIndexClient,
    find_built_index,
    parse_story_index,
    read_built_index,
)
from .introspection import StoryStoreIntrospector, story_frame_url
from .port_detection import (
    COMMON_PORTS,
    detect_dev_server_port,
    detect_dev_server_port_sync,
    looks_like_storybook,
)

__all__ = [
    "COMMON_PORTS",
    "INDEX_FILES",
    "StoryIndexClient",
    "StoryStoreIntrospector",
    "detect_dev_server_port",
    "detect_dev_server_port_sync",
    "find_built_index",
    "looks_like_storybook",
    "parse_story_index",
    "read_built_index",
    "story_frame_url",
]
