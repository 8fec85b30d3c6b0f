import logging
import math

import googlemaps
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)


class MapsService:
    """Road distance between a seller's pickup address and the customer's address"""

    AVERAGE_SPEED_KMH = 25  # city two-wheeler traffic

    def __init__(self, api_key=None):
        if api_key is None and has_app_context():
            api_key = current_app.config.get('GOOGLE_MAPS_API_KEY')
        self.api_key = api_key
        self.client = None
        if self.api_key:
            try:
                self.client = googlemaps.Client(key=self.api_key)
            except ValueError as e:
                logger.warning("Failed to initialize Google Maps client: %s", e)

    @staticmethod
    def format_address(address):
        """One-line text for a structured address dict (checkout/food addresses)"""
        if not isinstance(address, dict):
            return str(address or '')
        parts = [address.get(key) for key in ('address_line', 'landmark', 'city', 'state')]
        text = ', '.join(str(p) for p in parts if p)
        if address.get('pincode'):
            text = f"{text} - {address['pincode']}" if text else str(address['pincode'])
        return text

    @staticmethod
    def _parse_coordinates(location):
        if isinstance(location, tuple):
            return location
        if isinstance(location, str) and ',' in location:
            try:
                lat, lng = map(float, location.split(','))
                return lat, lng
            except ValueError:
                return None
        return None

    def calculate_distance(self, origin, destination):
        """
        Calculate distance and duration between two locations

        origin/destination may be (lat, lng) tuples, "lat,lng" strings or free-text
        addresses. Free-text addresses need the Google Maps client.
        """
        if self.client:
            try:
                origin_str = f"{origin[0]},{origin[1]}" if isinstance(origin, tuple) else origin
                dest_str = f"{destination[0]},{destination[1]}" if isinstance(destination, tuple) else destination

                result = self.client.distance_matrix(
                    origins=[origin_str],
                    destinations=[dest_str],
                    mode="driving"
                )

                element = result['rows'][0]['elements'][0]
                if element['status'] == 'OK':
                    return {
                        'distance_km': round(element['distance']['value'] / 1000, 2),
                        'duration_minutes': round(element['duration']['value'] / 60),
                        'status': 'success',
                        'method': 'google_maps'
                    }
            except (googlemaps.exceptions.ApiError, googlemaps.exceptions.TransportError,
                    googlemaps.exceptions.Timeout, KeyError, IndexError) as e:
                logger.warning("Google Maps API failed, falling back to Haversine: %s", e)

        # Fallback to Haversine
        start = self._parse_coordinates(origin)
        end = self._parse_coordinates(destination)
        if start and end:
            return self.calculate_haversine(start[0], start[1], end[0], end[1])

        return {
            'distance_km': 0,
            'duration_minutes': 0,
            'status': 'error',
            'message': 'Could not calculate distance (Maps API missing and coordinates invalid)'
        }

    def calculate_haversine(self, lat1, lon1, lat2, lon2):
        R = 6371  # Earth radius in km
        dLat = math.radians(lat2 - lat1)
        dLon = math.radians(lon2 - lon1)
        a = math.sin(dLat/2) * math.sin(dLat/2) + \
            math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * \
            math.sin(dLon/2) * math.sin(dLon/2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1-a))
        d = R * c

        duration_minutes = int(d / self.AVERAGE_SPEED_KMH * 60)

        return {
            'distance_km': round(d, 2),
            'duration_minutes': duration_minutes,
            'status': 'success',
            'method': 'haversine'
        }
