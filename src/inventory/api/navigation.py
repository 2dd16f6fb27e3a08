from dataclasses import dataclass


@dataclass(frozen=True)
class NavLink:
    label: str
    href: str


@dataclass(frozen=True)
class Navigation:
    """Site-wide links shown on every page. Built once by the app factory."""

    links: tuple[NavLink, ...]

    @classmethod
    def default(cls) -> "Navigation":
        return cls(
            links=(
                NavLink("Home", "/"),
                NavLink("Genres", "/category"),
                NavLink("Books", "/book"),
            )
        )

    def __iter__(self):
        return iter(self.links)
