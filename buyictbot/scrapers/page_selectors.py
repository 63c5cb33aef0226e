from __future__ import annotations
# buyictbot/scrapers/page_selectors.py
#
# Every DOM selector the crawler depends on. The portal is an AngularJS
# ServiceNow front end; when its markup changes, update these tables only.

# Listing page (search results)
LISTING_SELECTORS = {
    "card": "main a.dta-au-card-clickable",
    "card_title": "strong",
    "card_type": ".dta-pill",
    "pagination_link": ".pagination a",
}

# Detail page (one opportunity)
DETAIL_SELECTORS = {
    "overview_row": '[ng-repeat^="details in c.data.rfqMainDetails"]',
    "requirements_description": '[ng-bind-html="c.sce.trustAsHtml(c.data.description)"]',
    "requirements_row": '[ng-repeat="requirementDetail in c.data.requirements"]',
    # The portal reuses its 'criteria_essential' repeater inside the desirable
    # block on some pages, so match the repeater prefix within each area.
    "essential_criteria_row": '[sn-atf-area="Review criteria essential"] [ng-repeat^="criteria in data.criteria_"]',
    "desirable_criteria_row": '[sn-atf-area="Review criteria desirable"] [ng-repeat^="criteria in data.criteria_"]',
    "submission_item": '[ng-repeat="respReq in c.data.response_reqs"]',
    # cells inside a row
    "row_label": ".col-md-4",
    "row_value": ".col-md-8",
    "criteria_description": ".col-md-9",
    "criteria_weight": '[ng-if="criteria.weighting"]',
}

# Overview label carrying the closing date
CLOSING_DATE_LABEL = "Closing date"
