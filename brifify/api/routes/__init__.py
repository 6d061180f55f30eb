from brifify.api.routes import briefs, health, interview, tokens, users, webhooks

__all__ = ["briefs", "health", "interview", "tokens", "users", "webhooks"]
