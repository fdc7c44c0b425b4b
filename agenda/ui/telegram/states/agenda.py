from aiogram.fsm.state import StatesGroup, State


class TaskDialog(StatesGroup):
    # add flow walks through every field, edit flow jumps straight to review
    title = State()
    description = State()
    assignee = State()
    date = State()
    priority = State()
    review = State()


class UserDialog(StatesGroup):
    name = State()
    role = State()
