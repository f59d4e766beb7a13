"""Permission check with a fixed answer, set from configuration."""


class StaticPermissionCheck:
    def __init__(self, can_manage_plugins: bool = True):
        self.can_manage_plugins = can_manage_plugins

    def current_user_can_manage_plugins(self) -> bool:
        return self.can_manage_plugins
