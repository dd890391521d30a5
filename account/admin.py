from django.contrib import admin
from account.models import User
from account.models import Subscription, SubscriptionPlan

admin.site.register(User)
admin.site.register(Subscription)
admin.site.register(SubscriptionPlan)
