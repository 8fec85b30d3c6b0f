"""Request payload validators returning (is_valid, validated_data, errors)."""
