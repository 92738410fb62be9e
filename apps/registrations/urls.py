from django.urls import path

from .views import CheckRegistrationView, MemberDetailsView, MemberRegistrationView

urlpatterns = [
    path("member-registration/", MemberRegistrationView.as_view(), name="member-registration"),
    path("check-registration/", CheckRegistrationView.as_view(), name="check-registration"),
    path("member-details/", MemberDetailsView.as_view(), name="member-details"),
]
