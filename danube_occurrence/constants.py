"""Constants for Darwin Core occurrence data processing.

This module defines constants used throughout the Danube occurrence
toolkit, particularly for handling Darwin Core occurrence data.
"""

# Darwin Core terms expected in a standardised occurrence table
DWC_TERMS: list[str] = [
    "occurrenceID",
    "basisOfRecord",
    "catalogNumber",
    "recordNumber",
    "recordedBy",
    "recordedByID",
    "individualCount",
    "individualID",
    "organismQuantity",
    "organismQuantityType",
    "sex",
    "lifeStage",
    "establishmentMeans",
    "occurrenceStatus",
    "preparations",
    "disposition",
    "associatedMedia",
    "associatedOccurrences",
    "associatedReferences",
    "associatedSequences",
    "associatedTaxa",
    "materialSampleID",
    "occurrenceRemarks",
    "eventID",
    "parentEventID",
    "samplingProtocol",
    "samplingEffort",
    "eventDate",
    "eventTime",
    "startDayOfYear",
    "endDayOfYear",
    "year",
    "month",
    "day",
    "verbatimEventDate",
    "locationID",
    "higherGeographyID",
    "higherGeography",
    "continent",
    "waterBody",
    "islandGroup",
    "island",
    "country",
    "countryCode",
    "stateProvince",
    "county",
    "municipality",
    "locality",
    "verbatimLocality",
    "verbatimCoordinates",
    "verbatimLatitude",
    "verbatimLongitude",
    "verbatimCoordinateSystem",
    "decimalLatitude",
    "decimalLongitude",
    "coordinateUncertaintyInMeters",
    "coordinatePrecision",
    "geodeticDatum",
    "pointRadiusSpatialFit",
    "footprintWKT",
    "footprintSRS",
    "footprintSpatialFit",
    "locationRemarks",
    "georeferencedBy",
    "georeferencedDate",
    "georeferenceProtocol",
    "georeferenceSources",
    "georeferenceVerificationStatus",
    "georeferenceRemarks",
    "scientificName",
    "acceptedNameUsage",
    "taxonID",
    "acceptedTaxonID",
    "parentNameUsageID",
    "scientificNameID",
    "kingdom",
    "phylum",
    "class",
    "order",
    "family",
    "genus",
    "specificEpithet",
    "infraspecificEpithet",
    "taxonRank",
    "verbatimTaxonRank",
    "scientificNameAuthorship",
    "vernacularName",
    "nomenclaturalCode",
    "taxonomicStatus",
    "nomenclaturalStatus",
    "verbatimIdentification",
    "identificationID",
    "identificationQualifier",
    "typeStatus",
    "identifiedBy",
    "dateIdentified",
    "identificationRemarks",
    "datasetID",
    "datasetName",
    "institutionCode",
    "collectionCode",
    "ownerInstitutionCode",
    "rightsHolder",
    "license",
    "rights",
    "accessRights",
    "bibliographicCitation",
    "references",
]

# Bounds of the WGS84 geographic coordinate system, in decimal degrees
LATITUDE_RANGE: tuple[float, float] = (-90.0, 90.0)
LONGITUDE_RANGE: tuple[float, float] = (-180.0, 180.0)

WGS84_EPSG = 4326

# coordinateUncertaintyInMeters values that GBIF publishers commonly use as
# placeholders rather than real uncertainty estimates
SUSPICIOUS_UNCERTAINTY_VALUES: list[float] = [301.0, 3036.0, 999.0, 9999.0]
