from .gateway import SubscriptionGateway, UnsubscribeOutcome, is_valid_email, tenant_domain_from_host

__all__ = ["SubscriptionGateway", "UnsubscribeOutcome", "is_valid_email", "tenant_domain_from_host"]
