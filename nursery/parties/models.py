from django.db import models


COUNTRY_CHOICES = [
    ('IE', 'Ireland'),
    ('GB', 'Great Britain'),
    ('XI', 'Northern Ireland'),
    ('NL', 'Netherlands'),
]

CURRENCY_CHOICES = [
    ('EUR', 'Euro'),
    ('GBP', 'Pound Sterling'),
]


class Customer(models.Model):
    """Trade customers: garden centres, retail chains, landscapers"""
    org = models.ForeignKey('core.Organisation', on_delete=models.CASCADE, related_name='customers')
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=50, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=30, blank=True, null=True)
    store = models.CharField(max_length=200, blank=True, null=True, help_text="Retail group, e.g. Woodie's")
    accounts_email = models.EmailField(blank=True, null=True)
    country_code = models.CharField(max_length=2, choices=COUNTRY_CHOICES, default='IE')
    vat_number = models.CharField(max_length=50, blank=True, null=True)
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='EUR')
    payment_terms_days = models.PositiveIntegerField(default=30)
    credit_limit = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    pricing_tier = models.CharField(max_length=50, blank=True, null=True)
    account_code = models.CharField(max_length=50, blank=True, null=True)
    default_price_list = models.ForeignKey('pricing.PriceList', on_delete=models.SET_NULL, null=True, blank=True, related_name='customers')
    notes = models.TextField(blank=True, null=True)
    requires_pre_pricing = models.BooleanField(default=False, help_text="Plants leave with RRP labels applied")
    pre_pricing_foc = models.BooleanField(default=False, help_text="Pre-pricing is free of charge")
    pre_pricing_cost_per_label = models.DecimalField(max_digits=10, decimal_places=4, null=True, blank=True, help_text="Overrides the organisation's pre-pricing fee")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def primary_address(self):
        """Default shipping address, else the first address"""
        addresses = list(self.addresses.all())
        return next((a for a in addresses if a.is_default_shipping), addresses[0] if addresses else None)

    @property
    def primary_contact(self):
        """Primary contact, else the first contact"""
        contacts = list(self.contacts.all())
        return next((c for c in contacts if c.is_primary), contacts[0] if contacts else None)

    class Meta:
        db_table = 'customers'
        ordering = ['name']
        indexes = [
            models.Index(fields=['org', 'code'], name='idx_customer_org_code'),
        ]


class CustomerAddress(models.Model):
    """Delivery and billing addresses; a customer has one default of each"""
    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='addresses')
    label = models.CharField(max_length=100, default='Main')
    store_name = models.CharField(max_length=200, blank=True, null=True)
    line1 = models.CharField(max_length=255)
    line2 = models.CharField(max_length=255, blank=True, null=True)
    city = models.CharField(max_length=100, blank=True, null=True)
    county = models.CharField(max_length=100, blank=True, null=True)
    eircode = models.CharField(max_length=20, blank=True, null=True)
    country_code = models.CharField(max_length=2, choices=COUNTRY_CHOICES, default='IE')
    is_default_shipping = models.BooleanField(default=False)
    is_default_billing = models.BooleanField(default=False)
    contact_name = models.CharField(max_length=200, blank=True, null=True)
    contact_email = models.EmailField(blank=True, null=True)
    contact_phone = models.CharField(max_length=30, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.label}: {self.line1}"

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        others = CustomerAddress.objects.filter(customer_id=self.customer_id).exclude(pk=self.pk)
        if self.is_default_shipping:
            others.filter(is_default_shipping=True).update(is_default_shipping=False)
        if self.is_default_billing:
            others.filter(is_default_billing=True).update(is_default_billing=False)

    class Meta:
        db_table = 'customer_addresses'
        ordering = ['-is_default_shipping', 'id']


class CustomerContact(models.Model):
    """People at a customer; one may be primary"""
    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='contacts')
    name = models.CharField(max_length=200)
    role = models.CharField(max_length=100, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=30, blank=True, null=True)
    mobile = models.CharField(max_length=30, blank=True, null=True)
    is_primary = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        if self.is_primary:
            CustomerContact.objects.filter(customer_id=self.customer_id, is_primary=True).exclude(pk=self.pk).update(is_primary=False)

    class Meta:
        db_table = 'customer_contacts'
        ordering = ['-is_primary', 'id']
