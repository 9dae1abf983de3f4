from api.views.auth_handlers import login as login
from api.views.auth_handlers import logout as logout
from api.views.auth_handlers import me as me
from api.views.auth_handlers import register as register
from api.views.game_handlers import create_game as create_game
from api.views.game_handlers import get_game as get_game
from api.views.game_handlers import list_games as list_games
from api.views.game_handlers import perform_action as perform_action
from api.views.game_handlers import stats_summary as stats_summary
from api.views.user_handlers import get_profile as get_profile
from api.views.user_handlers import leaderboard as leaderboard
from api.views.user_handlers import recent_games as recent_games
from api.views.user_handlers import update_profile as update_profile
