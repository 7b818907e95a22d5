"""Default site content used until an administrator changes it.

Section keys keep the frontend's camelCase naming.
"""

from __future__ import annotations

import copy
from typing import Any

_DEFAULT_SETTINGS: dict[str, Any] = {
    "heroSection": {
        "title": "Connect Africa to Asia - Your Cargo Partner",
        "subtitle": (
            "Seamless product ordering and cargo services from top Asian "
            "suppliers to African markets"
        ),
        "backgroundType": "image",
        "backgroundImage": "",
        "backgroundVideo": "",
        "backgroundColor": "#1f2937",
        "ctaButtons": [
            {
                "text": "Start Shopping",
                "link": "/products",
                "style": "primary",
                "isActive": True,
            },
        ],
        "overlay": {"enabled": True, "opacity": 0.5, "color": "#000000"},
    },
    "advertisements": [],
    "productSection": {
        "title": "Shop Popular Products",
        "subtitle": "Discover trending products from top Asian suppliers",
        "displayCount": 8,
        "layout": "grid",
        "showPrices": True,
        "showRatings": True,
    },
    "theme": {
        "primaryColor": "#3b82f6",
        "secondaryColor": "#64748b",
        "accentColor": "#f59e0b",
        "backgroundColor": "#ffffff",
        "backgroundImage": "",
        "fontFamily": "inter",
        "borderRadius": "medium",
    },
    "companyInfo": {
        "name": "Tuma-Africa Link Cargo",
        "tagline": "Bridging Africa and Asia through seamless cargo solutions",
        "description": (
            "We specialize in connecting African customers with Asian suppliers, "
            "providing reliable cargo and product ordering services."
        ),
        "logo": "",
        "favicon": "",
        "address": {
            "street": "",
            "city": "",
            "state": "",
            "country": "",
            "zipCode": "",
        },
        "contact": {
            "phone": "",
            "email": "",
            "whatsapp": "",
            "supportHours": "Mon-Fri 9AM-6PM EAT",
        },
    },
    "socialLinks": {
        "facebook": "",
        "twitter": "",
        "instagram": "",
        "linkedin": "",
        "youtube": "",
        "tiktok": "",
        "whatsapp": "",
        "telegram": "",
    },
    "seo": {
        "metaTitle": "Tuma-Africa Link Cargo - Connect Africa to Asia",
        "metaDescription": (
            "Professional cargo and product ordering services connecting African "
            "customers with Asian suppliers. Fast, reliable, and secure."
        ),
        "keywords": [],
        "ogImage": "",
        "structuredData": {},
    },
    "legalPages": {
        "termsAndConditions": "",
        "privacyPolicy": "",
        "shippingPolicy": "",
        "returnPolicy": "",
        "aboutUs": "",
    },
    "features": {
        "enableChat": True,
        "enableReviews": True,
        "enableWishlist": True,
        "enableNotifications": True,
        "maintenanceMode": False,
        "registrationEnabled": True,
    },
    "emailTemplates": {
        "welcome": {"subject": "", "body": ""},
        "orderConfirmation": {"subject": "", "body": ""},
        "orderUpdate": {"subject": "", "body": ""},
        "passwordReset": {"subject": "", "body": ""},
    },
    "system": {
        "currency": "USD",
        "timezone": "Africa/Nairobi",
        "language": "en",
        "dateFormat": "DD/MM/YYYY",
    },
}

SECTIONS = frozenset(_DEFAULT_SETTINGS)


def get_default_settings_document() -> dict[str, Any]:
    return copy.deepcopy(_DEFAULT_SETTINGS)
