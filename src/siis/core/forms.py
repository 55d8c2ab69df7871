"""Sign-in and registration forms."""

from django import forms


class LoginForm(forms.Form):
    email = forms.EmailField(
        error_messages={"required": "Please enter your email."},
        widget=forms.EmailInput(attrs={"autocomplete": "email", "autofocus": True}),
    )
    password = forms.CharField(
        strip=False,
        error_messages={"required": "Please enter your password."},
        widget=forms.PasswordInput(attrs={"autocomplete": "current-password"}),
    )


class RegisterForm(forms.Form):
    """New member sign-up."""

    display_name = forms.CharField(
        label="Name",
        max_length=100,
        error_messages={"required": "Please enter your name."},
    )
    email = forms.EmailField(error_messages={"required": "Please enter your email."})
    password = forms.CharField(
        strip=False,
        min_length=6,
        widget=forms.PasswordInput(attrs={"autocomplete": "new-password"}),
        error_messages={
            "required": "Please choose a password.",
            "min_length": "Password must be at least 6 characters.",
        },
    )
    password_confirm = forms.CharField(
        label="Confirm password",
        strip=False,
        widget=forms.PasswordInput(attrs={"autocomplete": "new-password"}),
        error_messages={"required": "Please confirm your password."},
    )
    phone = forms.CharField(max_length=30, required=False)
    address = forms.CharField(max_length=255, required=False)

    def clean(self):
        cleaned_data = super().clean()
        password = cleaned_data.get("password")
        confirm = cleaned_data.get("password_confirm")
        if password and confirm and password != confirm:
            self.add_error("password_confirm", "Passwords do not match.")
        return cleaned_data
