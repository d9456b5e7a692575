# julianephdate/core — calendar math, leap-second table, UTC ⇄ JED converters.
