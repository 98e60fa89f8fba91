# RegulateThis content service.
