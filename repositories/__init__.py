"""
repositories/ - Data Access Layer
==================================
SubscriptionRepository owns the SQL for the subscriptions table;
CachingSubscriptionRepository puts the Redis cache in front of it and is
what the service layer talks to.
"""
