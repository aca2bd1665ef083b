from .main_window import MainWindow
from .game_popup import GamePopupDialog
from .analytics_widget import AnalyticsWidget
from .games_widget import GamesWidget
from .tasks_widget import TasksWidget

__all__ = ["MainWindow", "GamePopupDialog", "AnalyticsWidget", "GamesWidget", "TasksWidget"]
