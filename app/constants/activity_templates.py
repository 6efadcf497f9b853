from app.constants.activity_codes import ActivityCode


ACTIVITY_TEMPLATES = {
    # ---------------- QUOTES ----------------
    ActivityCode.CREATE_QUOTE:
        "{actor_role} ({actor_name}) created quote {target_name}",

    ActivityCode.UPDATE_QUOTE:
        "{actor_role} ({actor_name}) updated quote {target_name}: {changes}",

    ActivityCode.DELETE_QUOTE:
        "{actor_role} ({actor_name}) deleted quote {target_name}",

    ActivityCode.CHANGE_QUOTE_STATUS:
        "{actor_role} ({actor_name}) moved quote {target_name} from {from_status} to {to_status}",

    ActivityCode.APPROVE_QUOTE:
        "{actor_role} ({actor_name}) approved quote {target_name}",

    ActivityCode.REJECT_QUOTE:
        "{actor_role} ({actor_name}) rejected quote {target_name}",

    ActivityCode.REGISTER_PROPOSAL:
        "{actor_role} ({actor_name}) registered proposal {responses_count}/{expected_count} for quote {target_name}",

    ActivityCode.MARK_VISIT_OVERDUE:
        "{actor_role} ({actor_name}) marked visit overdue for quote {target_name}: {changes}",

    # ---------------- APPROVALS ----------------
    ActivityCode.CREATE_APPROVAL_LEVEL:
        "{actor_role} ({actor_name}) created approval level {target_name} from {amount}",

    ActivityCode.UPDATE_APPROVAL_LEVEL:
        "{actor_role} ({actor_name}) updated approval level {target_name}: {changes}",

    ActivityCode.REQUEST_APPROVAL:
        "{actor_role} ({actor_name}) requested approval of quote {target_name} ({amount}) at level {level_name}",

    ActivityCode.AUTO_APPROVE_QUOTE:
        "{actor_role} ({actor_name}) submitted quote {target_name} ({amount}); no approval level applies, approved automatically",

    # ---------------- PAYMENTS ----------------
    ActivityCode.CREATE_PAYMENT:
        "{actor_role} ({actor_name}) recorded payment of {amount} for quote {target_name}",

    ActivityCode.UPDATE_PAYMENT_STATUS:
        "{actor_role} ({actor_name}) changed payment #{payment_id} status to {to_status}",
}
