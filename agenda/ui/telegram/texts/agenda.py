APP_TITLE = "Moment Mídia"
APP_SUBTITLE = "Agenda de Tarefas"
LOADING = "Carregando agenda..."

MONTHS = (
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
)
WEEKDAYS = ("S", "T", "Q", "Q", "S", "S", "D")

# main menu
BTN_AGENDA = "Agenda"
BTN_NEW_TASK = "Nova Tarefa"
BTN_UNSCHEDULED = "Sem Data"
BTN_USERS = "Usuários"

# generic buttons
BTN_YES = "Sim"
BTN_NO = "Não"
BTN_SKIP = "Pular"
BTN_CANCEL = "Cancelar"
BTN_CLOSE = "Fechar"
BTN_CREATE_TASK = "Criar Tarefa"
BTN_UPDATE = "Atualizar"
BTN_NEW_USER = "Novo Usuário"

# stats
STAT_TOTAL = "Total de Tarefas"
STAT_COMPLETED = "Concluídas"
STAT_UNSCHEDULED = "Sem Data"
LEGEND = "• dias com tarefas   🔴 alta prioridade"

# lists
TASKS_FOR_DATE = "Tarefas para {day}"
UNSCHEDULED_TITLE = "Tarefas sem Data"
NO_TASKS = "Nenhuma tarefa encontrada"
NO_ASSIGNEE = "Nenhum responsável"

# task dialog
NEW_TASK_TITLE = "Nova Tarefa"
EDIT_TASK_TITLE = "Editar Tarefa"
ASK_TITLE = "Digite o título da tarefa..."
ASK_DESCRIPTION = "Descreva a tarefa (opcional)..."
ASK_ASSIGNEE = "Responsável:"
ASK_DATE = "Data agendada (opcional):"
REMOVE_DATE = "Sem data"
ASK_PRIORITY = "Prioridade:"
EMPTY_TITLE = "O título da tarefa é obrigatório."
FIELD_TITLE = "Título"
FIELD_DESCRIPTION = "Descrição"
FIELD_ASSIGNEE = "Responsável"
FIELD_DATE = "Data"
FIELD_PRIORITY = "Prioridade"
SAVING = "Salvando..."
TASK_NOT_FOUND = "Tarefa não encontrada. A lista foi atualizada."

# delete confirmation
CONFIRM_DELETE_TASK = "Tem certeza que deseja remover a tarefa \"{title}\"?"
CONFIRM_DELETE_USER = "Tem certeza que deseja remover este usuário?\n{name}"

# users
USERS_TITLE = "Gerenciar Usuários"
NO_USERS = "Nenhum usuário cadastrado"
ASK_USER_NAME = "Nome completo:"
ASK_USER_ROLE = "Cargo:"
EMPTY_NAME = "Nome é obrigatório."
USER_NOT_FOUND = "Usuário não encontrado."

CANCELLED = "Cancelado."
NOT_AUTHORIZED = "Acesso não autorizado."
