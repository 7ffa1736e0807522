import pytest
from fastapi.testclient import TestClient

from api.main import app, get_app_state
from core.data import build_dimension_datasets, default_widget_positions
from core.drilldown import DrillDownNavigator
from core.layout import WidgetLayoutManager


@pytest.fixture
def navigator():
    return DrillDownNavigator(build_dimension_datasets())


@pytest.fixture
def layout():
    return WidgetLayoutManager(default_widget_positions())


@pytest.fixture
def client():
    get_app_state.cache_clear()
    with TestClient(app) as c:
        yield c
    get_app_state.cache_clear()
