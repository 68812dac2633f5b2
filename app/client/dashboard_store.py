"""
Dashboard layout state
"""

class DashboardStore:
    """Sidebar visibility, closed until opened"""

    def __init__(self, is_sidebar_open: bool = False):
        self.is_sidebar_open = is_sidebar_open

    def toggle_sidebar(self) -> bool:
        self.is_sidebar_open = not self.is_sidebar_open
        return self.is_sidebar_open

    def set_sidebar_open(self, open: bool) -> bool:
        self.is_sidebar_open = open
        return self.is_sidebar_open
