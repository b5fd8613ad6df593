import pytest

from domain.plan_geometry import PlanGeometry
from domain.plan_graph import PlanGraph
from mission_plan.dialects.exceptions import DanglingReferenceError
from mission_plan.dialects.geometry_projector import MissionGeometryProjector
from mission_plan.dialects.task_graph_parser import TaskGraphParser
from services.mission_plan_service import BEHAVIOR_TREE, TASK_TEMPLATE, MissionPlanService

TASK_PLAN = """<TaskTemplate xmlns="https://robotics.ucmerced.edu/task">
  <AtomicTasks>
    <AtomicTask>
      <TaskID>go</TaskID>
      <TaskDescription>Drive to tree</TaskDescription>
      <Action>
        <ActionType>moveToLocation</ActionType>
        <moveToLocation><Latitude>37.2664</Latitude><Longitude>-120.4202</Longitude></moveToLocation>
      </Action>
    </AtomicTask>
    <AtomicTask>
      <TaskID>snap</TaskID>
      <TaskDescription>Thermal picture</TaskDescription>
      <Action>
        <ActionType>takeThermalPicture</ActionType>
        <takeThermalPicture><numberOfPictures>2</numberOfPictures></takeThermalPicture>
      </Action>
    </AtomicTask>
  </AtomicTasks>
  <ActionSequence>
    <Sequence>
      <TaskID>go</TaskID>
      <TaskID>snap</TaskID>
    </Sequence>
  </ActionSequence>
</TaskTemplate>"""

BT_PLAN = """<root BTCPP_format="4">
  <BehaviorTree ID="Main">
    <Sequence>
      <MoveToRelativeLocation name="Row start" x="5" y="0"/>
      <DetectObject name="Look"/>
    </Sequence>
  </BehaviorTree>
</root>"""

ORIGIN = (-120.4202, 37.2664)


@pytest.fixture
def service():
    return MissionPlanService(TaskGraphParser(), MissionGeometryProjector())


def test_detect_dialect(service):
    assert service.detect_dialect(TASK_PLAN) == TASK_TEMPLATE
    assert service.detect_dialect(BT_PLAN) == BEHAVIOR_TREE
    assert service.detect_dialect("<root/>") is None
    assert service.detect_dialect("not xml at all") is None
    assert service.detect_dialect("") is None


def test_read_dispatches_to_graph_builder(service):
    plan = service.read(TASK_PLAN)

    assert isinstance(plan, PlanGraph)
    assert [(e.source, e.target) for e in plan.edges] == [("go", "snap")]


def test_read_dispatches_to_projector(service):
    plan = service.read(BT_PLAN, ORIGIN)

    assert isinstance(plan, PlanGeometry)
    assert [s.name for s in plan.steps] == ["Start", "Row start", "Look"]


def test_read_behavior_tree_without_origin_is_empty(service):
    assert service.read(BT_PLAN).is_empty


def test_read_unknown_dialect_returns_none(service):
    assert service.read("<Mission/>") is None


def test_code_fenced_response_is_accepted(service):
    fenced = "```xml\n" + TASK_PLAN + "\n```"

    graph = service.parse_task_plan(fenced)

    assert set(graph.nodes) == {"go", "snap"}


def test_clean_response():
    assert MissionPlanService.clean_response("  <a/>  ") == "<a/>"
    assert MissionPlanService.clean_response("```\n<a/>\n```") == "<a/>"
    assert MissionPlanService.clean_response(None) == ""


def test_clarification_request():
    assert MissionPlanService.clarification_request("CLARIFY: which row?") == "which row?"
    assert MissionPlanService.clarification_request(TASK_PLAN) is None


def test_graph_errors_propagate(service):
    broken = TASK_PLAN.replace("<TaskID>snap</TaskID>\n    </Sequence>", "<TaskID>nope</TaskID>\n    </Sequence>")

    with pytest.raises(DanglingReferenceError):
        service.read(broken)
