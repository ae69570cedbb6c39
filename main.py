import sys
import logging
from datetime import datetime

from shotcraft.core.app import App
from shotcraft.core.objects import Project
from shotcraft.core.state import APP_TITLE, CACHE_PATH, LOGS_PATH, LOG_LEVEL, state, load_state, load_project
from shotcraft.screens import ScreensFlowScreen

if __name__ == "__main__":
    LOGS_PATH.mkdir(parents=True, exist_ok=True)
    current_day = datetime.now().strftime("%Y-%m-%d")
    logging.basicConfig(
        level=LOG_LEVEL,
        format="[%(asctime)s %(name)s] [%(levelname)s] %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(LOGS_PATH / (current_day + ".log"), encoding="utf-8"),
        ],
    )
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    load_state(CACHE_PATH)
    if len(sys.argv) > 1:
        state.project_path = sys.argv[1]

    project = Project()
    if state.project_path:
        data = load_project(state.project_path)
        if data is not None:
            project = Project.from_dict(data)

    app = App(title=APP_TITLE)
    app.show_screen(ScreensFlowScreen, project=project, project_path=state.project_path)
    app.mainloop()
