"""Tag vocabulary for the two mission plan dialects"""

class TaskTemplateVocabulary:
    """Element names of the nested Sequence/ConditionalActions dialect"""

    ROOT = 'TaskTemplate'
    ATOMIC_TASKS = 'AtomicTasks'
    ATOMIC_TASK = 'AtomicTask'
    TASK_ID = 'TaskID'
    TASK_DESCRIPTION = 'TaskDescription'
    ACTION = 'Action'
    ACTION_TYPE = 'ActionType'
    ACTION_SEQUENCE = 'ActionSequence'
    SEQUENCE = 'Sequence'
    CONDITIONAL_ACTIONS = 'ConditionalActions'
    CONDITIONAL = 'Conditional'
    RETURN_STATUS = 'ReturnStatus'

    # Location payloads: tag -> (latitude field, longitude field)
    LOCATION_PAYLOADS = {
        'moveToLocation': ('Latitude', 'Longitude'),
        'goToPosition': ('y', 'x'),
    }


class BehaviorTreeVocabulary:
    """Element and attribute names of the flat behavior-tree dialect"""

    ROOT = 'BehaviorTree'

    MOVE_TO_TREE = 'MoveToTreeID'
    MOVE_TO_GPS = 'MoveToGPSLocation'
    MOVE_RELATIVE = 'MoveToRelativeLocation'
    ORIENT_HEADING = 'OrientRobotHeading'
    DETECT_OBJECT = 'DetectObject'
    SAMPLE_LEAF = 'SampleLeaf'

    ACTION_TAGS = frozenset({
        MOVE_TO_TREE,
        MOVE_TO_GPS,
        MOVE_RELATIVE,
        ORIENT_HEADING,
        DETECT_OBJECT,
        SAMPLE_LEAF,
    })


class EdgeLabel:
    """Control-flow labels carried by mission edges"""

    UNCONDITIONAL = 'unconditional'
    TRUE = 'true'
    FALSE = 'false'

    ALL = (UNCONDITIONAL, TRUE, FALSE)

    @classmethod
    def from_return_status(cls, status):
        """Map a branch's declared return status onto an edge label"""
        if status == cls.TRUE:
            return cls.TRUE
        if status == cls.FALSE:
            return cls.FALSE
        return cls.UNCONDITIONAL


class StepCategory:
    """Categories assigned to projected plan steps"""

    START = 'start'
    RELATIVE_MOVE = 'relative-move'
    GPS_MOVE = 'gps-move'
    ORIENTATION = 'orientation'
    TASK = 'task'
