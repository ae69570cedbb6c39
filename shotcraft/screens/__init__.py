from .flow import ScreensFlowScreen, PreviewCanvas
