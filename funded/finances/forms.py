"""
finances/forms.py
─────────────────
Admin forms for events and QR codes.
"""

from django import forms

from .models import Event, PaymentMethod, QrCode


class EventForm(forms.ModelForm):
    """
    Event editor.  Accepted payment methods are picked with checkboxes and
    stored as a JSON list; the model's clean() enforces the QR code rule.
    """

    payment_methods = forms.MultipleChoiceField(
        choices=PaymentMethod.choices,
        widget=forms.CheckboxSelectMultiple,
        label='Accepted payment methods',
    )

    class Meta:
        model  = Event
        fields = [
            'school_class', 'name', 'description', 'cost', 'deadline',
            'category', 'payment_methods', 'qr_code',
        ]
        widgets = {
            'description': forms.Textarea(attrs={'rows': 3, 'placeholder': 'Optional details…'}),
            'cost':        forms.NumberInput(attrs={'step': '0.01', 'min': '0.01', 'placeholder': '0.00'}),
            'deadline':    forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if 'deadline' in self.fields:
            self.fields['deadline'].input_formats = ['%Y-%m-%d']


class QrCodeForm(forms.ModelForm):
    """
    Register a payee QR code by uploading its image or by typing a UPI id
    (the image is then generated).
    """

    image = forms.FileField(
        required=False,
        label='QR image',
        help_text='Leave empty to generate the QR from the UPI id.',
    )

    class Meta:
        model  = QrCode
        fields = ['school_class', 'name', 'upi_id', 'image']

    def clean(self):
        cleaned = super().clean()
        if self.instance.pk is None and not cleaned.get('image') and not cleaned.get('upi_id'):
            raise forms.ValidationError('Upload a QR image or enter a UPI id.')
        return cleaned
