"""
Core — Response Renderer

Successful responses leave the API as
  { "success": true, "data": ..., "meta": {...} }
A page from StandardPagination puts its rows in "data" and its counters
in "meta"; any other key next to the rows (the product block of a stock
history page) stays at the top level.

@file core/renderers.py
"""

from rest_framework.renderers import JSONRenderer

PAGE_META_KEYS = frozenset({'count', 'next', 'previous', 'per_page', 'current_page', 'last_page'})


def wrap(data):
    if isinstance(data, dict) and 'success' in data:
        return data
    if not (isinstance(data, dict) and 'results' in data):
        return {'success': True, 'data': data}

    envelope = {'success': True, 'data': data['results'], 'meta': {}}
    for key, value in data.items():
        if key in PAGE_META_KEYS:
            envelope['meta'][key] = value
        elif key != 'results':
            envelope[key] = value
    return envelope


class StandardJSONRenderer(JSONRenderer):

    def render(self, data, accepted_media_type=None, renderer_context=None):
        response = (renderer_context or {}).get('response')
        if response is None or response.status_code < 400:
            data = wrap(data)
        return super().render(data, accepted_media_type, renderer_context)
