# app/constants/quote_status_labels.py

from app.models.enums.quote_status import QuoteStatus


QUOTE_STATUS_LABELS = {
    QuoteStatus.draft: "Rascunho",
    QuoteStatus.sent: "Enviada",
    QuoteStatus.awaiting_visit: "Aguardando Visita",
    QuoteStatus.visit_scheduled: "Visita Agendada",
    QuoteStatus.visit_confirmed: "Visita Confirmada",
    QuoteStatus.visit_overdue: "Visita Atrasada",
    QuoteStatus.visit_partial_scheduled: "Visitas Parcialmente Agendadas",
    QuoteStatus.visit_partial_confirmed: "Visitas Parcialmente Confirmadas",
    QuoteStatus.receiving: "Recebendo Propostas",
    QuoteStatus.received: "Propostas Recebidas",
    QuoteStatus.ai_analyzing: "Análise IA",
    QuoteStatus.ai_negotiating: "Negociação IA",
    QuoteStatus.awaiting_ai_approval: "Aguardando Aprovação IA",
    QuoteStatus.under_review: "Em Análise",
    QuoteStatus.pending_approval: "Pendente Aprovação",
    QuoteStatus.approved: "Aprovada",
    QuoteStatus.rejected: "Rejeitada",
    QuoteStatus.finalized: "Finalizada",
    QuoteStatus.cancelled: "Cancelada",
    QuoteStatus.trash: "Lixeira",
}

# badge colours consumed by the dashboards
QUOTE_STATUS_COLORS = {
    QuoteStatus.draft: "gray",
    QuoteStatus.sent: "blue",
    QuoteStatus.awaiting_visit: "orange",
    QuoteStatus.visit_scheduled: "blue",
    QuoteStatus.visit_confirmed: "green",
    QuoteStatus.visit_overdue: "red",
    QuoteStatus.visit_partial_scheduled: "blue",
    QuoteStatus.visit_partial_confirmed: "green",
    QuoteStatus.receiving: "yellow",
    QuoteStatus.received: "green",
    QuoteStatus.ai_analyzing: "purple",
    QuoteStatus.ai_negotiating: "purple",
    QuoteStatus.awaiting_ai_approval: "yellow",
    QuoteStatus.under_review: "amber",
    QuoteStatus.pending_approval: "yellow",
    QuoteStatus.approved: "green",
    QuoteStatus.rejected: "red",
    QuoteStatus.finalized: "emerald",
    QuoteStatus.cancelled: "gray",
    QuoteStatus.trash: "gray",
}


def get_status_label(status) -> str:
    try:
        return QUOTE_STATUS_LABELS[QuoteStatus(status)]
    except (ValueError, KeyError):
        return str(status)


def get_status_color(status) -> str:
    try:
        return QUOTE_STATUS_COLORS[QuoteStatus(status)]
    except (ValueError, KeyError):
        return "gray"
