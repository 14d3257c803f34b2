"""
Category selection rules for the budget wizard.

Selections are plain dicts keyed by category name:

    {'Housing': {'selected': True, 'subcategories': {'Rent/Mortgage': True, ...}}}

All functions return new dicts and leave their input untouched.
"""
import copy
from typing import Dict, Any, List, Tuple

from taxonomy import DEFAULT_CATEGORIES, get_category

Selection = Dict[str, Dict[str, Any]]


def _refresh_category_flag(selection: Selection, category_name: str) -> None:
    entry = selection[category_name]
    entry['selected'] = any(entry['subcategories'].values())


def default_selection() -> Selection:
    """Essential categories selected, with their essential subcategories"""
    selection = {}
    for category in DEFAULT_CATEGORIES:
        selection[category['name']] = {
            'selected': category['isEssential'],
            'subcategories': {
                sub['name']: category['isEssential'] and sub['essential']
                for sub in category['subcategories']
            },
        }
        # Keep the category flag coherent with its subcategories
        _refresh_category_flag(selection, category['name'])
    return selection


def select_all() -> Selection:
    return {
        category['name']: {
            'selected': True,
            'subcategories': {sub['name']: True for sub in category['subcategories']},
        }
        for category in DEFAULT_CATEGORIES
    }


def deselect_all() -> Selection:
    return {
        category['name']: {
            'selected': False,
            'subcategories': {sub['name']: False for sub in category['subcategories']},
        }
        for category in DEFAULT_CATEGORIES
    }


def essential_only() -> Selection:
    return default_selection()


def _ensure_category(selection: Selection, category_name: str) -> None:
    if category_name not in selection:
        category = get_category(category_name)
        subcategories = {sub['name']: False for sub in category['subcategories']} if category else {}
        selection[category_name] = {'selected': False, 'subcategories': subcategories}


def toggle_category(selection: Selection, category_name: str) -> Selection:
    """
    Flip a category.

    Deselecting clears every subcategory; selecting turns on only the essential
    subcategories from the taxonomy.
    """
    updated = copy.deepcopy(selection)
    _ensure_category(updated, category_name)
    entry = updated[category_name]

    if entry['selected']:
        for name in entry['subcategories']:
            entry['subcategories'][name] = False
    else:
        category = get_category(category_name)
        if category:
            for sub in category['subcategories']:
                if sub['essential']:
                    entry['subcategories'][sub['name']] = True

    # A category with no essential subcategories stays unselected until one is picked
    _refresh_category_flag(updated, category_name)
    return updated


def toggle_subcategory(selection: Selection, category_name: str, subcategory_name: str) -> Selection:
    """Flip a subcategory; its category becomes the OR of its subcategories"""
    updated = copy.deepcopy(selection)
    _ensure_category(updated, category_name)
    subcategories = updated[category_name]['subcategories']
    subcategories[subcategory_name] = not subcategories.get(subcategory_name, False)
    _refresh_category_flag(updated, category_name)
    return updated


def selected_entries(selection: Selection) -> List[Tuple[str, str]]:
    """(category, subcategory) pairs that are selected, in taxonomy order"""
    entries = []
    for category_name, data in selection.items():
        if not data.get('selected'):
            continue
        for subcategory_name, is_selected in (data.get('subcategories') or {}).items():
            if is_selected:
                entries.append((category_name, subcategory_name))
    return entries


def selection_counts(selection: Selection) -> Tuple[int, int]:
    """(selected categories, selected subcategories)"""
    categories = sum(1 for data in selection.values() if data.get('selected'))
    subcategories = sum(
        1 for data in selection.values()
        for is_selected in (data.get('subcategories') or {}).values() if is_selected
    )
    return categories, subcategories


def validate_selection(selection: Selection) -> Tuple[bool, str]:
    categories, subcategories = selection_counts(selection)
    if categories < 1 or subcategories < 1:
        return False, "Select at least one category and one subcategory"
    return True, ""
