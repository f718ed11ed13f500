from servicefinder.ui.search_bar import SearchBarController

__all__ = ["SearchBarController"]
