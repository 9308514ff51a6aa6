from supabase import Client
import logging

logger = logging.getLogger(__name__)

SYSTEM_CONTROL = "system_control"


class AdminLogService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def log_admin_action(self, admin_id: str, description: str, action_type: str = SYSTEM_CONTROL) -> bool:
        """Record an admin action through the log_admin_action RPC. Never raises; the action itself already ran."""
        try:
            self.supabase.rpc("log_admin_action", {
                "p_admin_id": admin_id,
                "p_action_type": action_type,
                "p_description": description
            }).execute()
            return True
        except Exception as e:
            logger.error(f"Error logging admin action '{description}' for {admin_id}: {e}")
            return False
