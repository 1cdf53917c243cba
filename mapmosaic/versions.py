"""
Data versions of the game and the release they belong to.
"""

from types import MappingProxyType

MINECRAFT_VERSIONS = MappingProxyType(
    {
        169: "1.9",
        510: "1.10",
        819: "1.11",
        922: "1.11.2",
        1139: "1.12",
        1241: "1.12.1",
        1343: "1.12.2",
        1519: "1.13",
        1628: "1.13.1",
        1631: "1.13.2",
        1952: "1.14",
        1957: "1.14.1",
        1963: "1.14.2",
        1968: "1.14.3",
        1976: "1.14.4",
        2225: "1.15",
        2227: "1.15.1",
        2230: "1.15.2",
        2566: "1.16",
        2567: "1.16.1",
        2578: "1.16.2",
        2580: "1.16.3",
        2584: "1.16.4",
        2586: "1.16.5",
        2699: "21w10a",
        2724: "1.17",
        2730: "1.17.1",
        2860: "1.18",
        2865: "1.18.1",
        2975: "1.18.2",
        3105: "1.19",
        3117: "1.19.1",
        3120: "1.19.2",
        3218: "1.19.3",
        3337: "1.19.4",
        3463: "1.20",
        3465: "1.20.1",
        3578: "1.20.2",
        3698: "1.20.3",
        3700: "1.20.4",
        3837: "1.20.5",
        3839: "1.20.6",
        3953: "1.21",
        3955: "1.21.1",
        4080: "1.21.2",
        4082: "1.21.3",
        4189: "1.21.4",
        4325: "1.21.5",
    }
)


def version_description(data_version: int) -> str:
    return MINECRAFT_VERSIONS.get(data_version, "Unknown")


def latest_data_version() -> int:
    return max(MINECRAFT_VERSIONS)
