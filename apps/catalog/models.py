from __future__ import annotations

from django.core.validators import MinValueValidator
from django.db import models

from apps.catalog.domain.stock import derive_stock_status, effective_price


class Category(models.Model):
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True, default="")
    parent = models.ForeignKey("self", null=True, blank=True, on_delete=models.SET_NULL, related_name="children")
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["sort_order", "name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name


class Product(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_INACTIVE = "inactive"
    STATUS_DRAFT = "draft"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_INACTIVE, "Inactive"),
        (STATUS_DRAFT, "Draft"),
    ]

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    sku = models.CharField(max_length=64, unique=True)
    description = models.TextField(blank=True, default="")
    short_description = models.CharField(max_length=500, blank=True, default="")
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    sale_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    stock_quantity = models.IntegerField(default=0)
    manage_stock = models.BooleanField(default=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    featured = models.BooleanField(default=False)
    category = models.ForeignKey(
        Category, null=True, blank=True, on_delete=models.SET_NULL, related_name="products"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.name} ({self.sku})"

    @property
    def effective_price(self):
        return effective_price(self.price, self.sale_price)

    @property
    def stock_status(self) -> str:
        return derive_stock_status(self.stock_quantity).value

    @property
    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE


class VariationType(models.Model):
    name = models.CharField(max_length=100, unique=True)
    display_name = models.CharField(max_length=100)
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["sort_order", "name"]

    def __str__(self) -> str:
        return self.display_name or self.name


class VariationOption(models.Model):
    variation_type = models.ForeignKey(VariationType, on_delete=models.CASCADE, related_name="options")
    name = models.CharField(max_length=100)
    display_name = models.CharField(max_length=100)
    color_hex = models.CharField(max_length=7, blank=True, default="")
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["variation_type__sort_order", "sort_order", "name"]
        constraints = [
            models.UniqueConstraint(fields=["variation_type", "name"], name="uq_variation_option_type_name"),
        ]

    def __str__(self) -> str:
        return f"{self.variation_type.name}: {self.display_name or self.name}"


class ProductVariation(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="variations")
    sku = models.CharField(max_length=96, unique=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    sale_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    stock_quantity = models.IntegerField(default=0)
    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    options = models.ManyToManyField(
        VariationOption, through="ProductVariationCombination", related_name="variations"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-is_default", "id"]

    def __str__(self) -> str:
        return self.sku

    @property
    def effective_price(self):
        own = effective_price(self.price, self.sale_price)
        return own if own is not None else self.product.effective_price

    @property
    def stock_status(self) -> str:
        return derive_stock_status(self.stock_quantity).value

    @property
    def display_name(self) -> str:
        return " / ".join(option.display_name or option.name for option in self.options.all())


class ProductVariationCombination(models.Model):
    variation = models.ForeignKey(ProductVariation, on_delete=models.CASCADE, related_name="combinations")
    option = models.ForeignKey(VariationOption, on_delete=models.PROTECT, related_name="combinations")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["variation", "option"], name="uq_variation_combination"),
        ]
