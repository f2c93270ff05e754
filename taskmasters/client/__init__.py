"""Client side of TaskMasters: gateway, controllers and GUI."""
