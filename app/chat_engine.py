"""Chat conversation engine for guided task entry.

Turns a free-form chat session into project and task records. In free chat
every message goes to the AI assistant; a quick action starts a guided flow
that collects one field per turn:

    create_project: project name -> initial task
    add_task:       project number -> task name
    fill_form:      project number -> task number -> human minutes -> AI minutes

The engine is pure. Each call takes the current conversation state and a
read-only project snapshot and returns a Transition: the next state, the
assistant messages to show, and at most one mutation request for the caller
to apply. Each state class carries only the fields collected so far.
"""

from dataclasses import asdict, dataclass, field
from typing import ClassVar, Union

from config.settings import MAX_TASK_MINUTES

# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------

FREE_CHAT = "free_chat"
AWAITING_PROJECT_NAME = "awaiting_project_name"
AWAITING_PROJECT_INITIAL_TASK = "awaiting_project_initial_task"
AWAITING_TASK_TARGET_PROJECT_SELECTION = "awaiting_task_target_project_selection"
AWAITING_TASK_NAME = "awaiting_task_name"
AWAITING_FORM_PROJECT_SELECTION = "awaiting_form_project_selection"
AWAITING_FORM_TASK_SELECTION = "awaiting_form_task_selection"
AWAITING_FORM_HUMAN_TIME = "awaiting_form_human_time"
AWAITING_FORM_AI_TIME = "awaiting_form_ai_time"


@dataclass(frozen=True)
class FreeChat:
    mode: ClassVar[str] = FREE_CHAT


@dataclass(frozen=True)
class AwaitingProjectName:
    mode: ClassVar[str] = AWAITING_PROJECT_NAME


@dataclass(frozen=True)
class AwaitingProjectInitialTask:
    mode: ClassVar[str] = AWAITING_PROJECT_INITIAL_TASK
    project_name: str


@dataclass(frozen=True)
class AwaitingTaskTargetProjectSelection:
    mode: ClassVar[str] = AWAITING_TASK_TARGET_PROJECT_SELECTION


@dataclass(frozen=True)
class AwaitingTaskName:
    mode: ClassVar[str] = AWAITING_TASK_NAME
    selected_project_id: str
    selected_project_name: str


@dataclass(frozen=True)
class AwaitingFormProjectSelection:
    mode: ClassVar[str] = AWAITING_FORM_PROJECT_SELECTION


@dataclass(frozen=True)
class AwaitingFormTaskSelection:
    mode: ClassVar[str] = AWAITING_FORM_TASK_SELECTION
    selected_project_id: str
    selected_project_name: str
    project_tasks: tuple[str, ...]


@dataclass(frozen=True)
class AwaitingFormHumanTime:
    mode: ClassVar[str] = AWAITING_FORM_HUMAN_TIME
    selected_project_id: str
    selected_project_name: str
    task_name: str


@dataclass(frozen=True)
class AwaitingFormAiTime:
    mode: ClassVar[str] = AWAITING_FORM_AI_TIME
    selected_project_id: str
    selected_project_name: str
    task_name: str
    human_time: int


ChatState = Union[
    FreeChat,
    AwaitingProjectName,
    AwaitingProjectInitialTask,
    AwaitingTaskTargetProjectSelection,
    AwaitingTaskName,
    AwaitingFormProjectSelection,
    AwaitingFormTaskSelection,
    AwaitingFormHumanTime,
    AwaitingFormAiTime,
]


# ---------------------------------------------------------------------------
# Mutation requests (applied by the caller on a flow's final step)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreateProject:
    name: str
    initial_task_names: tuple[str, ...]
    confirmation: str = field(default="", compare=False)


@dataclass(frozen=True)
class AddTaskDefinition:
    project_id: str
    project_name: str
    task_name: str
    confirmation: str = field(default="", compare=False)


@dataclass(frozen=True)
class RecordTask:
    project_id: str
    project_name: str
    task_name: str
    human_time: int
    ai_time: int
    confirmation: str = field(default="", compare=False)


MutationRequest = Union[CreateProject, AddTaskDefinition, RecordTask]


@dataclass(frozen=True)
class Transition:
    """Result of one engine call."""

    state: ChatState
    messages: tuple[str, ...] = ()
    mutation: MutationRequest | None = None
    forward_to_chat: bool = False
    ignored: bool = False


# ---------------------------------------------------------------------------
# Quick actions and message templates
# ---------------------------------------------------------------------------

QUICK_ACTIONS = [
    {"action": "create_project", "label": "+ New Project"},
    {"action": "add_task", "label": "+ Add Task"},
    {"action": "fill_form", "label": "Add to Dashboard"},
]

ACTION_NAMES = [a["action"] for a in QUICK_ACTIONS]

WELCOME_MESSAGE = "Hi there! How can I help you today?"

MSG_ASK_PROJECT_NAME = "Great! What should we name the new project?"
MSG_ASK_INITIAL_TASK = "Got it. What is the first task for this project?"
MSG_PROJECT_CREATED = 'Project "{project}" created with task "{task}"!'
MSG_NO_PROJECTS = "You don't have any projects yet. Create one first!"
MSG_PICK_TASK_TARGET = "Which project would you like to add a task to? (Type the number)\n{items}"
MSG_PICK_FORM_PROJECT = "Let's fill out the form. First, select a project: (Type the number)\n{items}"
MSG_INVALID_PROJECT = "Invalid selection. Please type the number of the project."
MSG_ASK_TASK_NAME = 'Okay, adding to "{project}". What is the task name?'
MSG_TASK_ADDED = 'Task "{task}" added to project "{project}"!'
MSG_PROJECT_HAS_NO_TASKS = "This project has no tasks. Please add a task first."
MSG_PICK_FORM_TASK = 'Great. Select a task from "{project}": (Type the number)\n{items}'
MSG_INVALID_TASK = "Invalid selection. Please type the number of the task."
MSG_ASK_HUMAN_TIME = 'Selected "{task}". How many minutes did it take the Human?'
MSG_ASK_AI_TIME = "And how many minutes for Human + AI?"
MSG_INVALID_MINUTES = "Please enter a valid number for minutes."
MSG_MINUTES_OUT_OF_RANGE = "Minutes must be between 0 and {max_minutes}."
MSG_TASK_RECORDED = "Task added to the dashboard!"


def _numbered(items: list[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------


def parse_selection(text: str, count: int) -> int | None:
    """Parse a 1-based list selection.

    Args:
        text: The user's reply.
        count: Number of items in the list offered.

    Returns:
        The zero-based index, or None if the reply is not a whole number
        in [1, count].
    """
    cleaned = text.strip()
    if not cleaned.isdigit() or not cleaned.isascii():
        return None
    value = int(cleaned)
    if 1 <= value <= count:
        return value - 1
    return None


def parse_minutes(text: str) -> int:
    """Parse a minutes value for the guided form.

    Raises:
        ValueError: With the re-prompt text if the reply is not a whole number,
            or is negative or above MAX_TASK_MINUTES.
    """
    cleaned = text.strip()
    digits = cleaned[1:] if cleaned[:1] in ("-", "+") else cleaned
    if not digits.isdigit() or not digits.isascii():
        raise ValueError(MSG_INVALID_MINUTES)
    value = int(cleaned)
    if value < 0 or value > MAX_TASK_MINUTES:
        raise ValueError(MSG_MINUTES_OUT_OF_RANGE.format(max_minutes=MAX_TASK_MINUTES))
    return value


# ---------------------------------------------------------------------------
# Engine core
# ---------------------------------------------------------------------------


def initial_state() -> ChatState:
    return FreeChat()


def get_welcome_message() -> str:
    """Return the greeting shown above an empty conversation."""
    return WELCOME_MESSAGE


def get_buffer(state: ChatState) -> dict | None:
    """Return the fields collected by the active flow, or None in free chat."""
    if isinstance(state, FreeChat):
        return None
    return asdict(state)


def available_actions(state: ChatState) -> list[dict]:
    """Quick actions offered to the user; only in free chat."""
    return list(QUICK_ACTIONS) if isinstance(state, FreeChat) else []


def start_flow(state: ChatState, action: str, projects: list[dict]) -> Transition:
    """Start a guided flow from a quick action.

    Args:
        state: The current conversation state.
        action: One of ACTION_NAMES.
        projects: Ordered project snapshot ({id, name, tasks}).

    Returns:
        The Transition. Outside free chat the action is ignored and the
        state is returned unchanged.

    Raises:
        ValueError: If the action name is unknown.
    """
    if action not in ACTION_NAMES:
        raise ValueError(f"Unknown quick action: {action}. Must be one of {ACTION_NAMES}")

    if not isinstance(state, FreeChat):
        return Transition(state, ignored=True)

    if action == "create_project":
        return Transition(AwaitingProjectName(), (MSG_ASK_PROJECT_NAME,))

    if not projects:
        return Transition(state, (MSG_NO_PROJECTS,))

    items = _numbered([p["name"] for p in projects])
    if action == "add_task":
        return Transition(
            AwaitingTaskTargetProjectSelection(),
            (MSG_PICK_TASK_TARGET.format(items=items),),
        )
    return Transition(
        AwaitingFormProjectSelection(),
        (MSG_PICK_FORM_PROJECT.format(items=items),),
    )


def handle_user_input(state: ChatState, utterance: str, projects: list[dict]) -> Transition:
    """Consume one user message in the current mode.

    Args:
        state: The current conversation state.
        utterance: The user's non-empty message.
        projects: Ordered project snapshot ({id, name, tasks}), read-only.

    Returns:
        The Transition. Invalid input leaves the state unchanged and carries
        exactly one re-prompt message.
    """
    text = utterance.strip()
    handler = _HANDLERS[type(state)]
    return handler(state, text, projects)


# ---------------------------------------------------------------------------
# Step handlers
# ---------------------------------------------------------------------------


def _handle_free_chat(state, text, projects):
    return Transition(state, forward_to_chat=True)


def _handle_project_name(state, text, projects):
    return Transition(AwaitingProjectInitialTask(project_name=text), (MSG_ASK_INITIAL_TASK,))


def _handle_project_initial_task(state, text, projects):
    mutation = CreateProject(
        name=state.project_name,
        initial_task_names=(text,),
        confirmation=MSG_PROJECT_CREATED.format(project=state.project_name, task=text),
    )
    return Transition(FreeChat(), mutation=mutation)


def _handle_task_target_selection(state, text, projects):
    index = parse_selection(text, len(projects))
    if index is None:
        return Transition(state, (MSG_INVALID_PROJECT,))
    project = projects[index]
    next_state = AwaitingTaskName(
        selected_project_id=project["id"],
        selected_project_name=project["name"],
    )
    return Transition(next_state, (MSG_ASK_TASK_NAME.format(project=project["name"]),))


def _handle_task_name(state, text, projects):
    mutation = AddTaskDefinition(
        project_id=state.selected_project_id,
        project_name=state.selected_project_name,
        task_name=text,
        confirmation=MSG_TASK_ADDED.format(task=text, project=state.selected_project_name),
    )
    return Transition(FreeChat(), mutation=mutation)


def _handle_form_project_selection(state, text, projects):
    index = parse_selection(text, len(projects))
    if index is None:
        return Transition(state, (MSG_INVALID_PROJECT,))
    project = projects[index]
    tasks = tuple(project["tasks"])
    if not tasks:
        return Transition(FreeChat(), (MSG_PROJECT_HAS_NO_TASKS,))
    next_state = AwaitingFormTaskSelection(
        selected_project_id=project["id"],
        selected_project_name=project["name"],
        project_tasks=tasks,
    )
    message = MSG_PICK_FORM_TASK.format(project=project["name"], items=_numbered(list(tasks)))
    return Transition(next_state, (message,))


def _handle_form_task_selection(state, text, projects):
    index = parse_selection(text, len(state.project_tasks))
    if index is None:
        return Transition(state, (MSG_INVALID_TASK,))
    task_name = state.project_tasks[index]
    next_state = AwaitingFormHumanTime(
        selected_project_id=state.selected_project_id,
        selected_project_name=state.selected_project_name,
        task_name=task_name,
    )
    return Transition(next_state, (MSG_ASK_HUMAN_TIME.format(task=task_name),))


def _handle_form_human_time(state, text, projects):
    try:
        minutes = parse_minutes(text)
    except ValueError as e:
        return Transition(state, (str(e),))
    next_state = AwaitingFormAiTime(
        selected_project_id=state.selected_project_id,
        selected_project_name=state.selected_project_name,
        task_name=state.task_name,
        human_time=minutes,
    )
    return Transition(next_state, (MSG_ASK_AI_TIME,))


def _handle_form_ai_time(state, text, projects):
    try:
        minutes = parse_minutes(text)
    except ValueError as e:
        return Transition(state, (str(e),))
    mutation = RecordTask(
        project_id=state.selected_project_id,
        project_name=state.selected_project_name,
        task_name=state.task_name,
        human_time=state.human_time,
        ai_time=minutes,
        confirmation=MSG_TASK_RECORDED,
    )
    return Transition(FreeChat(), mutation=mutation)


_HANDLERS = {
    FreeChat: _handle_free_chat,
    AwaitingProjectName: _handle_project_name,
    AwaitingProjectInitialTask: _handle_project_initial_task,
    AwaitingTaskTargetProjectSelection: _handle_task_target_selection,
    AwaitingTaskName: _handle_task_name,
    AwaitingFormProjectSelection: _handle_form_project_selection,
    AwaitingFormTaskSelection: _handle_form_task_selection,
    AwaitingFormHumanTime: _handle_form_human_time,
    AwaitingFormAiTime: _handle_form_ai_time,
}
